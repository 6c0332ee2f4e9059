from __future__ import annotations

from django.test import SimpleTestCase

from ehr_dashboard.dashboard import widgets
from ehr_dashboard.tablestore.cache import DataCache
from ehr_dashboard.tablestore.testing import InMemoryTableStore


class ColorTest(SimpleTestCase):

    def test_known_values(self):
        self.assertEqual(widgets.get_status_color('Active'), 'bg-red-100 text-red-800')
        self.assertEqual(widgets.get_status_color('Scheduled'), 'bg-blue-100 text-blue-800')
        self.assertEqual(widgets.get_severity_color('Critical'), 'bg-red-100 text-red-800')
        self.assertEqual(widgets.get_adherence_color('Poor'), 'text-red-600')
        self.assertEqual(widgets.get_lab_status_color('Pending'), 'bg-yellow-100 text-yellow-800')

    def test_unknown_values_fall_back_to_neutral(self):
        for value in ('Bogus', '', None, 3, ['Active']):
            with self.subTest(value=value):
                self.assertEqual(widgets.get_status_color(value), widgets.NEUTRAL_BADGE)
                self.assertEqual(widgets.get_severity_color(value), widgets.NEUTRAL_BADGE)
                self.assertEqual(widgets.get_lab_status_color(value), widgets.NEUTRAL_BADGE)
                self.assertEqual(widgets.get_adherence_color(value), widgets.NEUTRAL_TEXT)


class KPICardsTest(SimpleTestCase):

    def test_cards(self):
        stats = {
            'total_patients': 4,
            'today_appointments': 2,
            'active_cases': 3,
            'active_medications': 5,
            'pending_labs': 1,
            'unread_messages': 0,
            'follow_ups_due': 2,
            'critical_labs': 1,
            'poor_adherence': 1,
        }

        cards = widgets.build_kpi_cards(stats)

        self.assertEqual(
            [c['key'] for c in cards],
            ['total_patients', 'today_appointments', 'active_cases', 'active_medications', 'pending_labs', 'unread_messages'],
        )
        self.assertEqual(cards[0]['value'], 4)
        self.assertEqual(cards[2]['subtitle'], '2 follow-ups due')
        self.assertEqual(cards[4]['subtitle'], '1 critical')


class StatusBadgesTest(SimpleTestCase):

    def test_counts_every_choice(self):
        cache = DataCache(InMemoryTableStore({
            'appointments': [{'status': 'Scheduled'}, {'status': 'Scheduled'}, {'status': 'Weird'}],
            'lab_results': [{'status': 'Critical'}],
        })).refresh()

        badges = widgets.build_status_badges(cache)

        scheduled = next(b for b in badges['appointments'] if b['label'] == 'Scheduled')
        self.assertEqual(scheduled['count'], 2)
        self.assertNotIn('Weird', [b['label'] for b in badges['appointments']])
        self.assertEqual(sum(b['count'] for b in badges['disease_history']), 0)
        critical = next(b for b in badges['lab_results'] if b['label'] == 'Critical')
        self.assertEqual(critical, {'label': 'Critical', 'count': 1, 'color': 'bg-red-100 text-red-800'})
