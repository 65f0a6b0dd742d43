from __future__ import annotations

from django.core.exceptions import ValidationError
from django.test import TestCase

from hackcore.apps.hackathons.exceptions import AuthorizationError, ConflictError, PhaseViolationError
from hackcore.apps.hackathons.tests.factories import (
    D0,
    D1,
    HACKING_NOW,
    HOUR,
    JUDGING_NOW,
    REGISTRATION_NOW,
    make_hackathon,
    make_user,
)
from hackcore.apps.registration.models import HackathonRegistration, Team, TeamMember
from hackcore.apps.registration.services import (
    cancel_registration,
    create_team,
    delete_team,
    join_team,
    leave_team,
    register_participant,
    set_registration_status,
)


class RegistrationTest(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.hackathon = make_hackathon()
        cls.alice = make_user("alice")

    def test_register_inside_window(self):
        reg = register_participant(self.hackathon, self.alice, now=REGISTRATION_NOW)
        self.assertEqual(reg.status, "confirmed")
        self.assertEqual(HackathonRegistration.objects.filter(hackathon=self.hackathon).count(), 1)

    def test_register_twice_is_a_conflict(self):
        register_participant(self.hackathon, self.alice, now=REGISTRATION_NOW)
        with self.assertRaises(ConflictError) as cm:
            register_participant(self.hackathon, self.alice, now=REGISTRATION_NOW)
        self.assertEqual(cm.exception.message, "Already registered for this hackathon.")
        self.assertEqual(HackathonRegistration.objects.count(), 1)

    def test_register_outside_window(self):
        with self.assertRaises(PhaseViolationError) as cm:
            register_participant(self.hackathon, self.alice, now=HACKING_NOW)
        self.assertEqual(cm.exception.message, "Registration closed at registration end on 2025-01-05 00:00 UTC.")

        with self.assertRaises(PhaseViolationError) as cm:
            register_participant(self.hackathon, self.alice, now=D0 - HOUR)
        self.assertEqual(cm.exception.message, "Registration opens at registration start on 2025-01-01 00:00 UTC.")
        self.assertFalse(HackathonRegistration.objects.exists())

    def test_register_in_draft(self):
        draft = make_hackathon(name="Draft Hack", status="draft")
        with self.assertRaises(PhaseViolationError) as cm:
            register_participant(draft, self.alice, now=REGISTRATION_NOW)
        self.assertEqual(cm.exception.message, "This hackathon is still in draft.")

    def test_cancel_and_register_again(self):
        register_participant(self.hackathon, self.alice, now=REGISTRATION_NOW)
        reg = cancel_registration(self.hackathon, self.alice)
        self.assertEqual(reg.status, "cancelled")

        with self.assertRaises(ConflictError):
            cancel_registration(self.hackathon, self.alice)

        reg = register_participant(self.hackathon, self.alice, now=REGISTRATION_NOW)
        self.assertEqual(reg.status, "confirmed")
        self.assertEqual(HackathonRegistration.objects.count(), 1)

    def test_cancel_without_registration(self):
        with self.assertRaises(ConflictError) as cm:
            cancel_registration(self.hackathon, self.alice)
        self.assertEqual(cm.exception.message, "You are not registered for this hackathon.")

    def test_moderation(self):
        reg = register_participant(self.hackathon, self.alice, now=REGISTRATION_NOW)
        with self.assertRaises(AuthorizationError):
            set_registration_status(reg, "rejected", is_organizer=False)
        with self.assertRaises(ValidationError):
            set_registration_status(reg, "banned", is_organizer=True)

        set_registration_status(reg, "rejected", is_organizer=True)
        reg.refresh_from_db()
        self.assertEqual(reg.status, "rejected")

        # una inscripción rechazada puede reactivarse
        reg = register_participant(self.hackathon, self.alice, now=REGISTRATION_NOW)
        self.assertEqual(reg.status, "confirmed")


class TeamTest(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.hackathon = make_hackathon(max_team_size=3)
        cls.leader = make_user("leader")
        cls.dev = make_user("dev")
        cls.designer = make_user("designer")
        cls.late = make_user("late")

    def _team(self, **kwargs):
        return create_team(self.hackathon, self.leader, "Rockets", now=REGISTRATION_NOW, **kwargs)

    def test_create_team_adds_leader(self):
        team = self._team(description="We ship")
        self.assertEqual(team.max_size, 3)
        self.assertEqual(team.status, "forming")
        member = TeamMember.objects.get(team=team)
        self.assertEqual(member.user, self.leader)
        self.assertTrue(member.is_leader)

    def test_create_team_validation(self):
        with self.assertRaises(ValidationError):
            create_team(self.hackathon, self.leader, "   ", now=REGISTRATION_NOW)
        with self.assertRaises(ValidationError):
            create_team(self.hackathon, self.leader, "Rockets", max_size=0, now=REGISTRATION_NOW)
        self.assertFalse(Team.objects.exists())

    def test_create_team_during_hacking(self):
        team = create_team(self.hackathon, self.leader, "Rockets", now=HACKING_NOW)
        self.assertEqual(team.hackathon, self.hackathon)

    def test_create_team_after_hacking(self):
        with self.assertRaises(PhaseViolationError) as cm:
            create_team(self.hackathon, self.leader, "Rockets", now=JUDGING_NOW)
        self.assertEqual(cm.exception.message, "Team formation closed at hacking end on 2025-01-10 00:00 UTC.")
        self.assertFalse(Team.objects.exists())

    def test_one_team_per_user_and_unique_name(self):
        self._team()
        with self.assertRaises(ConflictError):
            create_team(self.hackathon, self.leader, "Other", now=REGISTRATION_NOW)
        with self.assertRaises(ConflictError) as cm:
            create_team(self.hackathon, self.dev, "Rockets", now=REGISTRATION_NOW)
        self.assertEqual(cm.exception.message, "A team named 'Rockets' already exists for this hackathon.")
        self.assertEqual(Team.objects.count(), 1)

    def test_join_until_full(self):
        team = self._team()
        join_team(team, self.dev, now=D1 + HOUR)
        join_team(team, self.designer, role="Designer", now=D1 + HOUR)
        team.refresh_from_db()
        self.assertEqual(team.status, "complete")
        self.assertTrue(team.is_full())

        with self.assertRaises(ConflictError) as cm:
            join_team(team, self.late, now=D1 + HOUR)
        self.assertEqual(cm.exception.message, "Team is full.")

    def test_join_password(self):
        team = self._team(join_password="s3cret")
        with self.assertRaises(AuthorizationError):
            join_team(team, self.dev, "nope", now=REGISTRATION_NOW)
        join_team(team, self.dev, "s3cret", now=REGISTRATION_NOW)
        self.assertEqual(team.member_count(), 2)

    def test_join_twice(self):
        team = self._team()
        join_team(team, self.dev, now=REGISTRATION_NOW)
        with self.assertRaises(ConflictError):
            join_team(team, self.dev, now=REGISTRATION_NOW)

    def test_join_after_hacking(self):
        team = self._team()
        with self.assertRaises(PhaseViolationError):
            join_team(team, self.dev, now=JUDGING_NOW)
        self.assertEqual(team.member_count(), 1)

    def test_leave_team(self):
        team = self._team()
        join_team(team, self.dev, now=REGISTRATION_NOW)
        join_team(team, self.designer, now=REGISTRATION_NOW)

        leave_team(team, self.dev, now=HACKING_NOW)
        team.refresh_from_db()
        self.assertEqual(team.status, "forming")
        self.assertEqual(team.member_count(), 2)

        with self.assertRaises(ConflictError):
            leave_team(team, self.dev, now=HACKING_NOW)
        with self.assertRaises(ConflictError) as cm:
            leave_team(team, self.leader, now=HACKING_NOW)
        self.assertEqual(cm.exception.message, "The team leader cannot leave the team.")

    def test_delete_team_requires_organizer(self):
        team = self._team()
        with self.assertRaises(AuthorizationError):
            delete_team(team, is_organizer=False)
        delete_team(team, is_organizer=True)
        self.assertFalse(Team.objects.exists())
        self.assertFalse(TeamMember.objects.exists())
