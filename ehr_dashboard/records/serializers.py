"""Serializers for the entry forms.

Each serializer validates one submitted form (``request.POST``) and turns it
into the JSON record that is sent to the table store. Nothing is stored
locally; ``to_payload()`` is the only output.
"""

from __future__ import annotations

from datetime import date, datetime, time, timezone as dt_timezone

from django.utils import timezone
from rest_framework import serializers

from ehr_dashboard.dashboard.kpis import calculate_bmi

from . import constants as c


def _json_value(value):
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (date, time)):
        return value.isoformat()
    return value


def _iso_utc(value: datetime) -> str:
    """ISO timestamp in UTC with a ``Z`` suffix."""
    value = value.astimezone(dt_timezone.utc) if timezone.is_aware(value) else value
    return value.strftime('%Y-%m-%dT%H:%M:%S.') + f'{value.microsecond // 1000:03d}Z'


def _text(**kwargs):
    kwargs.setdefault('required', False)
    kwargs.setdefault('allow_blank', True)
    return serializers.CharField(**kwargs)


def _optional_choice(choices):
    return serializers.ChoiceField(choices=choices, required=False, allow_blank=True)


class RecordSerializer(serializers.Serializer):
    """Base class: validated form data -> table-store JSON record."""

    def to_payload(self) -> dict:
        return {key: _json_value(value) for key, value in self.validated_data.items()}


class PatientSerializer(RecordSerializer):
    first_name = serializers.CharField(max_length=100)
    last_name = serializers.CharField(max_length=100)
    date_of_birth = serializers.DateField(required=False, allow_null=True)
    gender = _optional_choice(c.GENDER_CHOICES)
    phone = _text(max_length=50)
    email = serializers.EmailField(required=False, allow_blank=True)
    address = _text()
    blood_type = _optional_choice(c.BLOOD_TYPE_CHOICES)
    emergency_contact = _text()
    insurance_info = _text()
    allergies = _text()
    notes = _text()

    def validate_date_of_birth(self, value):
        if value and value > timezone.localdate():
            raise serializers.ValidationError('Date of birth cannot be in the future.')
        return value


class DiseaseHistorySerializer(RecordSerializer):
    patient_id = serializers.CharField()
    disease_name = serializers.CharField(max_length=200)
    diagnosis_date = serializers.DateField(required=False, allow_null=True)
    status = serializers.ChoiceField(choices=c.DISEASE_STATUS_CHOICES)
    severity = _optional_choice(c.SEVERITY_CHOICES)
    symptoms = _text()
    treatment = _text()
    medication = _text()
    doctor_name = _text()
    follow_up_date = serializers.DateField(required=False, allow_null=True)
    notes = _text()


class AppointmentSerializer(RecordSerializer):
    """The form has separate date and time inputs; the record has one timestamp."""

    patient_id = serializers.CharField()
    appointment_date = serializers.DateField()
    appointment_time = serializers.TimeField()
    duration = serializers.IntegerField(min_value=5, max_value=480, default=c.DEFAULT_APPOINTMENT_DURATION)
    appointment_type = serializers.ChoiceField(choices=c.APPOINTMENT_TYPE_CHOICES)
    doctor_name = _text()
    chief_complaint = _text()
    notes = _text()
    status = serializers.ChoiceField(choices=c.APPOINTMENT_STATUS_CHOICES, default=c.APPOINTMENT_SCHEDULED)

    def validate(self, attrs):
        start = datetime.combine(attrs['appointment_date'], attrs.pop('appointment_time'))
        start = timezone.make_aware(start, timezone.get_current_timezone())
        attrs['appointment_date'] = _iso_utc(start)
        attrs['reminder_sent'] = False
        attrs['created_by'] = c.APPOINTMENT_CREATED_BY
        return attrs


class VitalsSerializer(RecordSerializer):
    """Vital signs in the units the clinic records them (°F, lbs, inches)."""

    patient_id = serializers.CharField()
    blood_pressure_systolic = serializers.IntegerField(required=False, allow_null=True, min_value=0, max_value=300)
    blood_pressure_diastolic = serializers.IntegerField(required=False, allow_null=True, min_value=0, max_value=200)
    heart_rate = serializers.IntegerField(required=False, allow_null=True, min_value=0, max_value=300)
    temperature = serializers.FloatField(required=False, allow_null=True, min_value=80, max_value=115)
    weight = serializers.FloatField(required=False, allow_null=True, min_value=0)
    height = serializers.FloatField(required=False, allow_null=True, min_value=0)
    respiratory_rate = serializers.IntegerField(required=False, allow_null=True, min_value=0, max_value=100)
    oxygen_saturation = serializers.IntegerField(required=False, allow_null=True, min_value=0, max_value=100)
    blood_sugar = serializers.FloatField(required=False, allow_null=True, min_value=0)
    pain_level = serializers.IntegerField(required=False, allow_null=True, min_value=0, max_value=10)
    recorded_by = _text(allow_null=True)
    notes = _text(allow_null=True)

    def validate(self, attrs):
        attrs['recorded_date'] = _iso_utc(timezone.now())
        bmi = calculate_bmi(attrs.get('weight'), attrs.get('height'))
        if bmi is not None:
            attrs['bmi'] = bmi
        return attrs


class MedicationSerializer(RecordSerializer):
    patient_id = serializers.CharField()
    medication_name = serializers.CharField(max_length=200)
    dosage = _text()
    frequency = _text()
    status = serializers.ChoiceField(choices=c.MEDICATION_STATUS_CHOICES, default=c.MEDICATION_ACTIVE)
    adherence_level = serializers.ChoiceField(choices=c.ADHERENCE_CHOICES, default=c.ADHERENCE_UNKNOWN)
    refills_remaining = serializers.IntegerField(min_value=0, default=0)
    start_date = serializers.DateField(required=False, allow_null=True)
    prescribing_doctor = _text()
    notes = _text()


class LabResultSerializer(RecordSerializer):
    patient_id = serializers.CharField()
    test_name = serializers.CharField(max_length=200)
    test_date = serializers.DateField(required=False, allow_null=True)
    result_value = _text()
    unit = _text(max_length=50)
    reference_range = _text(max_length=100)
    status = serializers.ChoiceField(choices=c.LAB_STATUS_CHOICES, default=c.LAB_PENDING)
    ordered_by = _text()
    notes = _text()

    def validate(self, attrs):
        if not attrs.get('test_date'):
            attrs['test_date'] = timezone.localdate()
        return attrs


class MessageSerializer(RecordSerializer):
    patient_id = serializers.CharField()
    subject = serializers.CharField(max_length=200)
    content = serializers.CharField()
    sender = _text()
    recipient = _text()
    priority = serializers.ChoiceField(choices=c.MESSAGE_PRIORITY_CHOICES, default='Normal')
    status = serializers.ChoiceField(choices=c.MESSAGE_STATUS_CHOICES, default=c.MESSAGE_UNREAD)

    def validate(self, attrs):
        attrs['sent_date'] = _iso_utc(timezone.now())
        return attrs


# form name -> (table-store resource, serializer)
FORM_SERIALIZERS = {
    'patient': (c.PATIENTS, PatientSerializer),
    'disease': (c.DISEASE_HISTORY, DiseaseHistorySerializer),
    'appointment': (c.APPOINTMENTS, AppointmentSerializer),
    'vitals': (c.VITALS, VitalsSerializer),
    'medication': (c.MEDICATIONS, MedicationSerializer),
    'lab_result': (c.LAB_RESULTS, LabResultSerializer),
    'message': (c.MESSAGES, MessageSerializer),
}
