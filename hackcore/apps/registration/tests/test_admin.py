from django.contrib.auth import get_user_model
from django.test import TestCase

from hackcore.apps.hackathons.tests.factories import make_hackathon, make_user
from hackcore.apps.registration.models import Team

User = get_user_model()


class TeamAdminTest(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.admin = User.objects.create_superuser(
            username="admin_hack",
            email="admin@example.com",
            password="Pass1234!",
        )
        cls.hackathon = make_hackathon(organizer=cls.admin)
        cls.leader = make_user("leader")

    def setUp(self):
        self.client.login(username="admin_hack", password="Pass1234!")

    def _add_team(self, name):
        return self.client.post("/admin/registration/team/add/", {
            "hackathon": self.hackathon.pk,
            "name": name,
            "description": "",
            "leader": self.leader.pk,
            "max_size": 4,
            "join_password": "",
            "status": "forming",
            "members-TOTAL_FORMS": "0",
            "members-INITIAL_FORMS": "0",
            "members-MIN_NUM_FORMS": "0",
            "members-MAX_NUM_FORMS": "1000",
            "_save": "Save",
        })

    def test_team_created_from_admin_updates_team_count(self):
        with self.captureOnCommitCallbacks(execute=True):
            r = self._add_team("Rockets")
        self.assertEqual(r.status_code, 302)
        self.assertTrue(Team.objects.filter(hackathon=self.hackathon, name="Rockets").exists())
        self.hackathon.refresh_from_db()
        self.assertEqual(self.hackathon.team_count, 1)

    def test_team_deleted_from_admin_updates_team_count(self):
        with self.captureOnCommitCallbacks(execute=True):
            self._add_team("Rockets")
        team = Team.objects.get(name="Rockets")

        with self.captureOnCommitCallbacks(execute=True):
            r = self.client.post(f"/admin/registration/team/{team.pk}/delete/", {"post": "yes"})
        self.assertEqual(r.status_code, 302)
        self.assertFalse(Team.objects.exists())
        self.hackathon.refresh_from_db()
        self.assertEqual(self.hackathon.team_count, 0)
