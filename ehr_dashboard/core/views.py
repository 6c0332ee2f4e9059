"""Core app views.

Contains:
- health: Health check endpoint, including reachability of the table store
"""

import logging

from django.http import JsonResponse

from ehr_dashboard.records.constants import PATIENTS
from ehr_dashboard.tablestore.client import get_client
from ehr_dashboard.tablestore.exceptions import TableStoreError

logger = logging.getLogger(__name__)


def health(request):
    """Health check endpoint - no authentication required."""
    try:
        get_client().list(PATIENTS)
    except TableStoreError as exc:
        logger.warning('Health check failed: %s', exc)
        return JsonResponse({'status': 'error', **exc.to_dict()}, status=503)

    return JsonResponse({'status': 'ok'})
