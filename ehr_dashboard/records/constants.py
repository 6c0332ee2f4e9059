"""
Vocabulary shared by the table store, the aggregation helpers and the views.

Resource names are the ``tables/<name>`` paths of the REST table store.
The status lists mirror the options offered in the entry forms.
"""

# Table-store resources
PATIENTS = 'patients'
DISEASE_HISTORY = 'disease_history'
APPOINTMENTS = 'appointments'
VITALS = 'vitals'
MEDICATIONS = 'medications'
LAB_RESULTS = 'lab_results'
SOAP_NOTES = 'soap_notes'
MESSAGES = 'messages'
PRESCRIPTIONS = 'prescriptions'

RESOURCES = (
    PATIENTS,
    APPOINTMENTS,
    MEDICATIONS,
    VITALS,
    LAB_RESULTS,
    SOAP_NOTES,
    MESSAGES,
    PRESCRIPTIONS,
    DISEASE_HISTORY,
)


# Disease history
DISEASE_ACTIVE = 'Active'
DISEASE_RECOVERED = 'Recovered'
DISEASE_CHRONIC = 'Chronic'
DISEASE_UNDER_TREATMENT = 'Under Treatment'
DISEASE_REMISSION = 'Remission'

DISEASE_STATUS_CHOICES = (
    DISEASE_ACTIVE,
    DISEASE_RECOVERED,
    DISEASE_CHRONIC,
    DISEASE_UNDER_TREATMENT,
    DISEASE_REMISSION,
)

# "Active case" on the dashboard
ACTIVE_DISEASE_STATUSES = frozenset({DISEASE_ACTIVE, DISEASE_UNDER_TREATMENT})

SEVERITY_CHOICES = ('Mild', 'Moderate', 'Severe', 'Critical')


# Appointments
APPOINTMENT_SCHEDULED = 'Scheduled'
APPOINTMENT_CONFIRMED = 'Confirmed'
APPOINTMENT_COMPLETED = 'Completed'
APPOINTMENT_CANCELLED = 'Cancelled'
APPOINTMENT_IN_PROGRESS = 'In Progress'
APPOINTMENT_NO_SHOW = 'No Show'

APPOINTMENT_STATUS_CHOICES = (
    APPOINTMENT_SCHEDULED,
    APPOINTMENT_CONFIRMED,
    APPOINTMENT_COMPLETED,
    APPOINTMENT_CANCELLED,
    APPOINTMENT_IN_PROGRESS,
    APPOINTMENT_NO_SHOW,
)

APPOINTMENT_TYPE_CHOICES = (
    'Consultation',
    'Follow-up',
    'Check-up',
    'Emergency',
    'Procedure',
    'Telemedicine',
)

DEFAULT_APPOINTMENT_DURATION = 30
APPOINTMENT_CREATED_BY = 'Current User'


# Medications
MEDICATION_ACTIVE = 'Active'
MEDICATION_STATUS_CHOICES = (MEDICATION_ACTIVE, 'Discontinued', 'Completed', 'On Hold')

ADHERENCE_POOR = 'Poor'
ADHERENCE_UNKNOWN = 'Unknown'
ADHERENCE_CHOICES = ('Excellent', 'Good', 'Fair', ADHERENCE_POOR, ADHERENCE_UNKNOWN)


# Lab results
LAB_PENDING = 'Pending'
LAB_CRITICAL = 'Critical'
LAB_STATUS_CHOICES = (LAB_PENDING, 'Normal', 'Abnormal', LAB_CRITICAL)


# Messages
MESSAGE_UNREAD = 'Unread'
MESSAGE_READ = 'Read'
MESSAGE_STATUS_CHOICES = (MESSAGE_UNREAD, MESSAGE_READ)
MESSAGE_PRIORITY_CHOICES = ('Low', 'Normal', 'High', 'Urgent')


# Patients
GENDER_CHOICES = ('Male', 'Female', 'Other')
BLOOD_TYPE_CHOICES = ('A+', 'A-', 'B+', 'B-', 'AB+', 'AB-', 'O+', 'O-')

UNKNOWN_PATIENT = 'Unknown Patient'
