"""Tests for loading teams, coaches and season rosters."""
from pathlib import Path
from types import SimpleNamespace

import pandas as pd
import pytest
from tenacity import wait_none

from teamroll.models import Coach, Player, Team
from teamroll.services.reference import (
    ReferenceDataLoader,
    download_weekly_roster,
    parse_csv,
    read_csv,
)
from teamroll.services.reference import reference_loader

DATA_DIR = Path(__file__).parent.parent / "data"

ROSTER_CSV = """season,team,position,full_name,gsis_id,jersey_number,status,headshot_url,week
2025,KC,QB,Patrick Mahomes,00-0033873,15,ACT,https://img/pm.png,1
2025,KC,QB,Patrick Mahomes,00-0033873,15,ACT,https://img/pm2.png,2
2025,KC,TE,Travis Kelce,00-0030506,87,ACT,,1
2025,KC,K,Harrison Butker,00-0033303,7,ACT,,1
2025,LA,WR,Puka Nacua,00-0039075,12,ACT,,1
2024,KC,RB,Old Back,00-0000001,25,ACT,,1
2025,XXX,RB,Nobody Team,00-0000002,30,ACT,,1
2025,KC,RB,,00-0000003,31,ACT,,1
"""


@pytest.fixture
def loader(db_session):
    return ReferenceDataLoader(db_session)


@pytest.fixture
def teams_loaded(loader, db_session):
    loader.load_teams(read_csv(DATA_DIR / "teams.csv"))
    db_session.commit()
    return loader


class TestParseCsv:

    def test_comma_separated(self):
        rows = parse_csv("a,b\n1,2\n")
        assert rows.to_dict("records") == [{"a": "1", "b": "2"}]

    def test_tab_separated_with_bom(self):
        rows = parse_csv("\ufeffa\tb\n1\t2\n")
        assert rows.to_dict("records") == [{"a": "1", "b": "2"}]

    def test_empty_cells_read_as_blank_strings(self):
        rows = parse_csv("team,full_name\nKC,\n")
        assert rows.to_dict("records") == [{"team": "KC", "full_name": ""}]

    def test_reads_data_files(self):
        teams = read_csv(DATA_DIR / "teams.csv")
        assert len(teams) == 32
        assert {"abbreviation", "name", "logo_url"} <= set(teams.columns)


class TestLoadTeams:

    def test_loads_all_teams(self, loader, db_session):
        report = loader.load_teams(read_csv(DATA_DIR / "teams.csv"))
        db_session.commit()

        assert report.created == 32
        assert db_session.query(Team).count() == 32
        kc = db_session.query(Team).filter_by(abbreviation="KC").one()
        assert kc.name == "Kansas City Chiefs"
        assert kc.logo_url.endswith("/kc.png")

    def test_reload_updates_in_place(self, teams_loaded, db_session):
        before = {t.abbreviation: t.id for t in db_session.query(Team)}

        report = teams_loaded.load_teams(pd.DataFrame([{"abbreviation": "KC", "name": "KC Chiefs"}]))

        assert (report.created, report.updated) == (0, 1)
        kc = db_session.query(Team).filter_by(abbreviation="KC").one()
        assert kc.id == before["KC"]
        assert kc.name == "KC Chiefs"
        # Logo kept when the new row has none
        assert kc.logo_url is not None

    def test_skips_incomplete_rows(self, loader):
        report = loader.load_teams(pd.DataFrame([{"abbreviation": "", "name": "Nobody"}, {"abbreviation": "XX"}]))
        assert report.skipped == 2
        assert report.created == 0


class TestLoadCoaches:

    def test_one_coach_per_team(self, teams_loaded, db_session):
        report = teams_loaded.load_coaches(read_csv(DATA_DIR / "coaches.csv"))
        db_session.commit()

        assert report.created == 32
        assert db_session.query(Coach).count() == 32

    def test_replaces_coach_name(self, teams_loaded, db_session):
        teams_loaded.load_coaches(pd.DataFrame([{"team": "NYJ", "full_name": "Robert Saleh"}]))
        report = teams_loaded.load_coaches(pd.DataFrame([{"team": "NYJ", "full_name": "Aaron Glenn"}]))

        assert report.updated == 1
        assert [c.full_name for c in db_session.query(Coach)] == ["Aaron Glenn"]

    def test_unknown_team_is_reported(self, teams_loaded):
        report = teams_loaded.load_coaches(pd.DataFrame([{"team": "LON", "full_name": "Someone"}]))

        assert report.skipped == 1
        assert report.unknown_teams == ["LON"]


class TestLoadRoster:

    def test_keeps_fantasy_positions_of_the_season(self, teams_loaded, db_session):
        report = teams_loaded.load_roster(parse_csv(ROSTER_CSV), season=2025)
        db_session.commit()

        players = {p.full_name: p for p in db_session.query(Player)}
        assert set(players) == {"Patrick Mahomes", "Travis Kelce", "Puka Nacua"}
        assert report.created == 3
        assert "XXX" in report.unknown_teams

    def test_last_weekly_row_wins(self, teams_loaded, db_session):
        teams_loaded.load_roster(parse_csv(ROSTER_CSV), season=2025)

        mahomes = db_session.query(Player).filter_by(gsis_id="00-0033873").one()
        assert mahomes.headshot_url == "https://img/pm2.png"
        assert mahomes.jersey_number == 15
        assert mahomes.season == 2025

    def test_legacy_abbreviation_maps_to_current_team(self, teams_loaded, db_session):
        teams_loaded.load_roster(parse_csv(ROSTER_CSV), season=2025)

        nacua = db_session.query(Player).filter_by(full_name="Puka Nacua").one()
        assert nacua.team.abbreviation == "LAR"

    def test_reload_moves_traded_player(self, teams_loaded, db_session):
        teams_loaded.load_roster(parse_csv(ROSTER_CSV), season=2025)
        traded = ROSTER_CSV.replace("2025,KC,TE,Travis Kelce", "2025,DEN,TE,Travis Kelce")

        report = teams_loaded.load_roster(parse_csv(traded), season=2025)

        assert report.created == 0
        assert report.updated == 3
        kelce = db_session.query(Player).filter_by(full_name="Travis Kelce").one()
        assert kelce.team.abbreviation == "DEN"
        assert db_session.query(Player).count() == 3

    def test_same_player_in_two_seasons(self, teams_loaded, db_session):
        teams_loaded.load_roster(parse_csv(ROSTER_CSV), season=2025)
        teams_loaded.load_roster(parse_csv(ROSTER_CSV.replace("2025,", "2026,")), season=2026)

        assert db_session.query(Player).filter_by(gsis_id="00-0033873").count() == 2

    def test_latest_week_wins_regardless_of_row_order(self, teams_loaded, db_session):
        rows = parse_csv(
            "season,team,position,full_name,gsis_id,jersey_number,week\n"
            "2025,KC,RB,Isiah Pacheco,00-0037197,10,3\n"
            "2025,KC,RB,Isiah Pacheco,00-0037197,1,1\n"
        )

        teams_loaded.load_roster(rows, season=2025)

        pacheco = db_session.query(Player).filter_by(gsis_id="00-0037197").one()
        assert pacheco.jersey_number == 10

    def test_missing_required_columns(self, teams_loaded):
        with pytest.raises(ValueError, match="gsis_id"):
            teams_loaded.load_roster(parse_csv("team,position\nKC,QB\n"), season=2025)


# nfl_data_py.import_weekly_rosters column names and dtypes
WEEKLY_ROSTER = pd.DataFrame(
    {
        "season": [2025, 2025, 2025],
        "team": ["BUF", "BUF", "BUF"],
        "position": ["QB", "QB", "WR"],
        "player_name": ["Josh Allen", "Josh Allen", "Khalil Shakir"],
        "player_id": ["00-0034857", "00-0034857", "00-0037261"],
        "jersey_number": [17.0, 17.0, float("nan")],
        "status": ["ACT", "ACT", "ACT"],
        "headshot_url": [None, "https://img/ja.png", None],
        "week": [1, 2, 1],
    }
)


class TestWeeklyRosterDownload:

    def test_loads_nfl_data_py_frame(self, teams_loaded, db_session):
        report = teams_loaded.load_roster(WEEKLY_ROSTER, season=2025)

        assert report.created == 2
        allen = db_session.query(Player).filter_by(gsis_id="00-0034857").one()
        assert allen.full_name == "Josh Allen"
        assert allen.jersey_number == 17
        assert allen.headshot_url == "https://img/ja.png"
        shakir = db_session.query(Player).filter_by(gsis_id="00-0037261").one()
        assert shakir.jersey_number is None
        assert shakir.headshot_url is None

    def test_retries_network_errors(self, monkeypatch):
        calls = []

        def import_weekly_rosters(years):
            calls.append(years)
            if len(calls) < 3:
                raise ConnectionResetError("connection reset")
            return WEEKLY_ROSTER

        monkeypatch.setattr(
            reference_loader, "nfl", SimpleNamespace(import_weekly_rosters=import_weekly_rosters)
        )

        frame = download_weekly_roster.retry_with(wait=wait_none())(2025)

        assert frame is WEEKLY_ROSTER
        assert calls == [[2025], [2025], [2025]]

    def test_gives_up_after_three_attempts(self, monkeypatch):
        calls = []

        def import_weekly_rosters(years):
            calls.append(years)
            raise OSError("HTTP Error 404: Not Found")

        monkeypatch.setattr(
            reference_loader, "nfl", SimpleNamespace(import_weekly_rosters=import_weekly_rosters)
        )

        with pytest.raises(OSError):
            download_weekly_roster.retry_with(wait=wait_none())(1900)
        assert len(calls) == 3

    def test_requires_nfl_data_py(self, monkeypatch):
        monkeypatch.setattr(reference_loader, "nfl", None)

        with pytest.raises(RuntimeError, match="nfl_data_py"):
            download_weekly_roster.retry_with(wait=wait_none())(2025)
