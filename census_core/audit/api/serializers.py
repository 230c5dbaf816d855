from rest_framework import serializers

from census_core.audit.models import AuditEvent


class AuditEventSerializer(serializers.ModelSerializer):
    # API field name "timestamp" maps to the model's occurred_at
    timestamp = serializers.DateTimeField(source="occurred_at", read_only=True)
    actor_user_id = serializers.IntegerField(read_only=True, allow_null=True)

    class Meta:
        model = AuditEvent
        fields = [
            "id",
            "unit",
            "entity_type",
            "entity_id",
            "event_code",
            "actor_user_id",
            "timestamp",
            "metadata",
        ]
        read_only_fields = fields


class AuditQuerySerializer(serializers.Serializer):
    """Query-string filters for GET /audit/events/."""
    entity_type = serializers.ChoiceField(choices=["CensusRecord", "MortalityRecord", "UserProfile"], required=False)
    entity_id = serializers.UUIDField(required=False)
    event_code = serializers.CharField(max_length=128, required=False)
    actor_user_id = serializers.IntegerField(required=False, min_value=1)
    limit = serializers.IntegerField(required=False, min_value=1, max_value=500, default=200)
