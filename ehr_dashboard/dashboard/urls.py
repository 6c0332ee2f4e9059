"""
Dashboard URL Configuration
"""
from django.urls import path

from . import views

app_name = 'dashboard'

urlpatterns = [
    # Page and navigation
    path('', views.DashboardView.as_view(), name='index'),
    path('section/<str:name>/', views.SectionView.as_view(), name='section'),
    path('fragments/<str:name>/', views.SectionFragmentView.as_view(), name='fragment'),

    # Patients and EHR
    path('patients/search/', views.PatientSearchView.as_view(), name='patient-search'),
    path('patients/<str:patient_id>/ehr/', views.PatientEHRView.as_view(), name='patient-ehr'),
    path('patients/<str:patient_id>/diseases/', views.DiseaseHistoryView.as_view(), name='disease-history'),
    path('patients/<str:patient_id>/delete/', views.DeletePatientView.as_view(), name='patient-delete'),
    path('ehr/tab/<str:tab>/', views.EHRTabView.as_view(), name='ehr-tab'),

    # Modals
    path('modal/close/<str:name>/', views.CloseModalView.as_view(), name='modal-close'),
    path('modal/<str:name>/', views.ModalView.as_view(), name='modal'),

    # Forms (create/update)
    path('forms/patient/', views.PatientFormView.as_view(), name='form-patient'),
    path('forms/disease/', views.DiseaseFormView.as_view(), name='form-disease'),
    path('forms/appointment/', views.AppointmentFormView.as_view(), name='form-appointment'),
    path('forms/vitals/', views.VitalsFormView.as_view(), name='form-vitals'),
    path('forms/medication/', views.MedicationFormView.as_view(), name='form-medication'),
    path('forms/lab_result/', views.LabResultFormView.as_view(), name='form-lab_result'),
    path('forms/message/', views.MessageFormView.as_view(), name='form-message'),

    # Deletes
    path('records/<str:table>/<str:record_id>/delete/', views.DeleteRecordView.as_view(), name='record-delete'),

    # Appointments
    path('appointments/filter/', views.AppointmentFilterView.as_view(), name='appointment-filter'),

    # JSON
    path('api/dashboard/', views.DashboardAPIView.as_view(), name='api'),
    path('api/patients/<str:patient_id>/', views.PatientAPIView.as_view(), name='patient-api'),
]
