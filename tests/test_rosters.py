"""Tests for joining rosters with league users."""

from cooked.models.sleeper import LeagueUser, Roster
from cooked.services.sleeper_service import UNKNOWN_OWNER, displayed_teams, join_rosters
from helpers import CDN_URL, make_roster, make_user


def _rosters(*rosters):
    return [Roster.model_validate(roster) for roster in rosters]


def _users(*users):
    return [LeagueUser.model_validate(user) for user in users]


class TestJoinRosters:
    def test_every_roster_produces_one_team(self, settings):
        rosters = _rosters(make_roster(1, "u1"), make_roster(2, "ghost"), make_roster(3, None))
        teams = join_rosters(rosters, _users(make_user("u1", "alice")), settings)
        assert [team.roster_id for team in teams] == [1, 2, 3]

    def test_known_owner(self, settings):
        rosters = _rosters(make_roster(1, "u1"))
        users = _users(make_user("u1", "alice", team_name="Tua Lipa", avatar="abc123"))
        team = join_rosters(rosters, users, settings)[0]
        assert team.team_name == "Tua Lipa"
        assert team.owner_name == "alice"
        assert team.avatar == f"{CDN_URL}/avatars/abc123"
        assert team.is_bot is False

    def test_missing_team_name_falls_back_to_roster_id(self, settings):
        team = join_rosters(_rosters(make_roster(7, "u1")), _users(make_user("u1", "alice")), settings)[0]
        assert team.team_name == "Team 7"
        assert team.avatar is None

    def test_unmatched_owner_is_bot(self, settings):
        team = join_rosters(_rosters(make_roster(2, "ghost")), _users(make_user("u1", "alice")), settings)[0]
        assert team.is_bot is True
        assert team.owner_name == UNKNOWN_OWNER == "Unknown Owner"
        assert team.team_name == "Team 2"

    def test_orphaned_roster_is_bot(self, settings):
        team = join_rosters(_rosters(make_roster(3, None)), [], settings)[0]
        assert team.is_bot is True

    def test_displayed_teams_hides_bots(self, settings):
        rosters = _rosters(make_roster(1, "u1"), make_roster(2, "ghost"))
        teams = join_rosters(rosters, _users(make_user("u1", "alice")), settings)
        assert [team.roster_id for team in displayed_teams(teams)] == [1]
