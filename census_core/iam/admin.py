from django.contrib import admin

from census_core.iam.models import UserProfile


@admin.register(UserProfile)
class UserProfileAdmin(admin.ModelAdmin):
    list_display = ("user", "role", "status", "assigned_unit", "created_at")
    list_filter = ("role", "status", "assigned_unit")
    search_fields = ("user__username", "user__email")
    # role and status move through the audited /users/ endpoints
    readonly_fields = ("role", "status", "created_at", "updated_at")
