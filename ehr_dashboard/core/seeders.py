import logging
import random
from datetime import datetime, time, timedelta

from django.utils import timezone

from ehr_dashboard.dashboard.kpis import calculate_bmi
from ehr_dashboard.records import constants as c

logger = logging.getLogger(__name__)

RANDOM_SEED = 42

FIRST_NAMES_MALE = ['James', 'Robert', 'Michael', 'David', 'Daniel', 'Thomas', 'Carlos', 'Ahmed']
FIRST_NAMES_FEMALE = ['Mary', 'Linda', 'Susan', 'Sarah', 'Emily', 'Maria', 'Aisha', 'Chen']
LAST_NAMES = ['Smith', 'Johnson', 'Williams', 'Brown', 'Garcia', 'Miller', 'Davis', 'Lopez', 'Khan', 'Wong']
DOCTORS = ['Dr. Adams', 'Dr. Baker', 'Dr. Patel', 'Dr. Nguyen']
DISEASES = [
    'Hypertension', 'Type 2 Diabetes', 'Asthma', 'Migraine', 'Hyperlipidemia',
    'Osteoarthritis', 'GERD', 'Hypothyroidism', 'Depression', 'Bronchitis',
]
MEDICATIONS = [
    ('Lisinopril', '10mg', 'Once daily'),
    ('Metformin', '500mg', 'Twice daily'),
    ('Albuterol', '90mcg', 'As needed'),
    ('Atorvastatin', '20mg', 'Once daily'),
    ('Levothyroxine', '50mcg', 'Once daily'),
    ('Omeprazole', '20mg', 'Once daily'),
]
LAB_TESTS = [
    ('Hemoglobin A1c', '%', '4.0-5.6'),
    ('LDL Cholesterol', 'mg/dL', '<100'),
    ('TSH', 'mIU/L', '0.4-4.0'),
    ('Potassium', 'mmol/L', '3.5-5.0'),
    ('Creatinine', 'mg/dL', '0.6-1.2'),
]


def seed_tablestore(client, patients: int = 12, flush: bool = False) -> dict:
    """
    Seeds demo records into the table store:
    - patients
    - disease history, appointments, vitals, medications, lab results,
      SOAP notes and messages for each patient

    If flush=True every existing record of every resource is deleted first.
    """
    random.seed(RANDOM_SEED)

    stats: dict[str, int] = {}

    if flush:
        for resource in c.RESOURCES:
            rows = client.list(resource)
            for row in rows:
                client.delete(resource, row['id'])
            stats[f'{resource}_deleted'] = len(rows)

    created = {resource: 0 for resource in c.RESOURCES if resource != c.PRESCRIPTIONS}
    now = timezone.localtime()

    for _ in range(patients):
        patient = client.create(c.PATIENTS, _patient())
        created[c.PATIENTS] += 1
        pid = patient.get('id')
        if not pid:
            logger.warning('Table store returned a patient without id; skipping child records')
            continue

        for disease in _disease_history(pid, now):
            client.create(c.DISEASE_HISTORY, disease)
            created[c.DISEASE_HISTORY] += 1
        for appointment in _appointments(pid, now):
            client.create(c.APPOINTMENTS, appointment)
            created[c.APPOINTMENTS] += 1
        for vitals in _vitals(pid, now):
            client.create(c.VITALS, vitals)
            created[c.VITALS] += 1
        for medication in _medications(pid, now):
            client.create(c.MEDICATIONS, medication)
            created[c.MEDICATIONS] += 1
        for lab in _lab_results(pid, now):
            client.create(c.LAB_RESULTS, lab)
            created[c.LAB_RESULTS] += 1
        for note in _soap_notes(pid, now):
            client.create(c.SOAP_NOTES, note)
            created[c.SOAP_NOTES] += 1
        for message in _messages(pid, now):
            client.create(c.MESSAGES, message)
            created[c.MESSAGES] += 1

    stats.update({f'{resource}_created': count for resource, count in created.items()})
    return stats


def _patient() -> dict:
    if random.random() < 0.5:
        first_name, gender = random.choice(FIRST_NAMES_MALE), 'Male'
    else:
        first_name, gender = random.choice(FIRST_NAMES_FEMALE), 'Female'
    last_name = random.choice(LAST_NAMES)
    birth = datetime(random.randint(1940, 2010), random.randint(1, 12), random.randint(1, 28))
    return {
        'first_name': first_name,
        'last_name': last_name,
        'date_of_birth': birth.date().isoformat(),
        'gender': gender,
        'phone': f'555-{random.randint(100, 999)}-{random.randint(1000, 9999)}',
        'email': f'{first_name}.{last_name}@seed.local'.lower(),
        'address': f'{random.randint(1, 999)} Main Street',
        'blood_type': random.choice(c.BLOOD_TYPE_CHOICES),
        'emergency_contact': f'{random.choice(FIRST_NAMES_FEMALE + FIRST_NAMES_MALE)} {last_name}',
        'insurance_info': f'INS-{random.randint(100000, 999999)}',
        'allergies': random.choice(['', 'Penicillin', 'Peanuts', 'Latex']),
        'notes': '',
    }


def _disease_history(pid, now) -> list[dict]:
    records = []
    for disease in random.sample(DISEASES, random.randint(0, 3)):
        diagnosed = now - timedelta(days=random.randint(30, 2000))
        follow_up = now + timedelta(days=random.randint(-5, 20))
        records.append({
            'patient_id': pid,
            'disease_name': disease,
            'diagnosis_date': diagnosed.date().isoformat(),
            'status': random.choice(c.DISEASE_STATUS_CHOICES),
            'severity': random.choice(c.SEVERITY_CHOICES),
            'symptoms': '',
            'treatment': '',
            'medication': '',
            'doctor_name': random.choice(DOCTORS),
            'follow_up_date': follow_up.date().isoformat(),
            'notes': '',
        })
    return records


def _appointments(pid, now) -> list[dict]:
    records = []
    for _ in range(random.randint(1, 4)):
        day = now.date() + timedelta(days=random.randint(-30, 14))
        start = timezone.make_aware(
            datetime.combine(day, time(random.randint(8, 16), random.choice([0, 30]))),
            timezone.get_current_timezone(),
        )
        if start < now:
            status = random.choice([c.APPOINTMENT_COMPLETED, c.APPOINTMENT_COMPLETED, c.APPOINTMENT_NO_SHOW, c.APPOINTMENT_SCHEDULED])
        else:
            status = random.choice([c.APPOINTMENT_SCHEDULED, c.APPOINTMENT_CONFIRMED])
        records.append({
            'patient_id': pid,
            'appointment_date': start.isoformat(),
            'duration': random.choice([15, 30, 45, 60]),
            'appointment_type': random.choice(c.APPOINTMENT_TYPE_CHOICES),
            'doctor_name': random.choice(DOCTORS),
            'chief_complaint': '',
            'notes': '',
            'status': status,
            'reminder_sent': False,
            'created_by': 'Seed',
        })
    return records


def _vitals(pid, now) -> list[dict]:
    records = []
    for i in range(random.randint(0, 3)):
        weight = round(random.uniform(110, 250), 1)
        height = round(random.uniform(60, 76), 1)
        records.append({
            'patient_id': pid,
            'recorded_date': (now - timedelta(days=30 * i + random.randint(0, 10))).isoformat(),
            'blood_pressure_systolic': random.randint(100, 160),
            'blood_pressure_diastolic': random.randint(60, 100),
            'heart_rate': random.randint(55, 100),
            'temperature': round(random.uniform(97.0, 100.4), 1),
            'weight': weight,
            'height': height,
            'respiratory_rate': random.randint(12, 20),
            'oxygen_saturation': random.randint(94, 100),
            'blood_sugar': random.randint(70, 180),
            'pain_level': random.randint(0, 6),
            'recorded_by': 'Nurse Station',
            'notes': '',
            'bmi': calculate_bmi(weight, height),
        })
    return records


def _medications(pid, now) -> list[dict]:
    records = []
    for name, dosage, frequency in random.sample(MEDICATIONS, random.randint(0, 2)):
        records.append({
            'patient_id': pid,
            'medication_name': name,
            'dosage': dosage,
            'frequency': frequency,
            'status': random.choice([c.MEDICATION_ACTIVE, c.MEDICATION_ACTIVE, 'Discontinued']),
            'adherence_level': random.choice(c.ADHERENCE_CHOICES),
            'refills_remaining': random.randint(0, 5),
            'start_date': (now - timedelta(days=random.randint(10, 400))).date().isoformat(),
            'prescribing_doctor': random.choice(DOCTORS),
            'notes': '',
        })
    return records


def _lab_results(pid, now) -> list[dict]:
    records = []
    for name, unit, reference in random.sample(LAB_TESTS, random.randint(0, 2)):
        records.append({
            'patient_id': pid,
            'test_name': name,
            'test_date': (now - timedelta(days=random.randint(0, 60))).date().isoformat(),
            'result_value': str(round(random.uniform(0.5, 150), 1)),
            'unit': unit,
            'reference_range': reference,
            'status': random.choice([c.LAB_PENDING, 'Normal', 'Normal', 'Abnormal', c.LAB_CRITICAL]),
            'ordered_by': random.choice(DOCTORS),
            'notes': '',
        })
    return records


def _soap_notes(pid, now) -> list[dict]:
    return [
        {
            'patient_id': pid,
            'visit_date': (now - timedelta(days=random.randint(1, 90))).date().isoformat(),
            'provider_name': random.choice(DOCTORS),
            'subjective': 'Patient reports feeling well.',
            'objective': 'Vitals within normal limits.',
            'assessment': 'Stable.',
            'plan': 'Continue current treatment; follow up in 3 months.',
        }
        for _ in range(random.randint(0, 2))
    ]


def _messages(pid, now) -> list[dict]:
    return [
        {
            'patient_id': pid,
            'subject': random.choice(['Lab results available', 'Appointment reminder', 'Prescription refill']),
            'content': 'Please contact the clinic at your convenience.',
            'sender': random.choice(DOCTORS),
            'recipient': 'Front Desk',
            'priority': random.choice(c.MESSAGE_PRIORITY_CHOICES),
            'status': random.choice(c.MESSAGE_STATUS_CHOICES),
            'sent_date': (now - timedelta(hours=random.randint(1, 200))).isoformat(),
        }
        for _ in range(random.randint(0, 2))
    ]
