# census_core/admissions/constants.py

PATIENTS = "patients"
MORTALITY_RECORDS = "mortality_records"

COLLECTIONS = (PATIENTS, MORTALITY_RECORDS)


class PatientStatus:
    """
    Lifecycle states of an admission episode.
    Deceased only ever appears in the mortality archive.
    """
    ACTIVE = "Active"
    DISCHARGED = "Discharged"
    DECEASED = "Deceased"

    LIVE = (ACTIVE, DISCHARGED)
    CHOICES = (
        (ACTIVE, "Active"),
        (DISCHARGED, "Discharged"),
        (DECEASED, "Deceased"),
    )
    LIVE_CHOICES = CHOICES[:2]
    ARCHIVED_CHOICES = CHOICES[2:]


GENDERS = ("Male", "Female")
CATEGORIES = ("Medicine", "Surgery", "Urology", "Nephrology", "Cardiology", "Others")
LOCATIONS = ("OT", "WARD", "ICU", "ER", "Pvt Ward")
CODE_STATUSES = ("Full Code", "DNR", "DNI")

# Suggestion list only; consultant stays free text.
# Override with settings.CENSUS_CONSULTANTS.
CONSULTANTS = (
    "Dr. Salman Khalid",
    "Dr. Ruqaya",
    "Dr. Kiran Nasir",
    "Dr. Bilal",
    "Dr. Shoaib",
    "Dr. Murtaza",
    "Dr. Raheela",
    "Dr. Aysha",
    "Dr. Shakeel",
    "Dr. Zohaib",
    "Dr. Shariq",
)

# Audit event codes
EVENT_ADMITTED = "census.admitted"
EVENT_REVISED = "census.revised"
EVENT_ARCHIVED = "census.archived"
EVENT_DELETED = "census.deleted"
EVENT_MORTALITY_RECORDED = "mortality.recorded"
EVENT_MORTALITY_REVISED = "mortality.revised"
EVENT_MORTALITY_DELETED = "mortality.deleted"
