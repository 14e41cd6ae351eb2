"""Shared fixtures: registered builtins and a seeded SQLite store."""

from pathlib import Path

import pytest

from roundsapi.engine import register_builtin_handlers
from roundsapi.persistence.config import DatabaseConfig
from roundsapi.persistence.sqlalchemy_access import SQLAlchemyDataAccess
from roundsapi.validation import register_builtin_validators

SCHEMA_FILE = Path(__file__).parent.parent / "src" / "roundsapi" / "persistence" / "schema.sql"

SEED_SQL = """
INSERT INTO season (season_id, name) VALUES (1, '2014 Season');
INSERT INTO contest_group (group_id, group_desc) VALUES (1, 'Algorithm');

INSERT INTO contest (contest_id, name, start_date, end_date, status, group_id, ad_text,
                     ad_start, ad_end, ad_task, ad_command, activate_menu, season_id)
VALUES (10, 'SRM 600', '2014-01-01 10:00:00', '2014-01-02 10:00:00', 'A', 1, 'Join now',
        NULL, NULL, NULL, NULL, 1, 1);
INSERT INTO contest (contest_id, name, start_date, end_date, status, group_id, ad_text,
                     ad_start, ad_end, ad_task, ad_command, activate_menu, season_id)
VALUES (11, 'TCO14', '2014-03-01 10:00:00', NULL, 'F', NULL, NULL,
        NULL, NULL, NULL, NULL, NULL, NULL);

INSERT INTO round (round_id, contest_id, name, short_name, status, round_type_id)
VALUES (100, 10, 'SRM 600', 'SRM600', 'A', 1);
INSERT INTO round (round_id, contest_id, name, short_name, status, round_type_id)
VALUES (101, 10, 'SRM 601', NULL, 'A', 1);
INSERT INTO round (round_id, contest_id, name, short_name, status, round_type_id)
VALUES (102, 11, 'TCO14 Round 1', 'TCO R1', 'F', 2);
INSERT INTO round (round_id, contest_id, name, short_name, status, round_type_id)
VALUES (103, 11, 'Marathon 1', NULL, 'P', 10);
INSERT INTO round (round_id, contest_id, name, short_name, status, round_type_id)
VALUES (104, 10, 'Practice Room', NULL, 'P', 3);

INSERT INTO round_statistics (round_id, total_competitors, div_i_competitors, div_ii_competitors)
VALUES (100, 30, 20, 10);
INSERT INTO round_statistics (round_id, total_competitors, div_i_competitors, div_ii_competitors)
VALUES (101, 12, 8, 4);

INSERT INTO round_leader (round_id, division, placed, handle, rating, points)
VALUES (100, 'Division-I', 1, 'tourist', 3500, 1200.5);
INSERT INTO round_leader (round_id, division, placed, handle, rating, points)
VALUES (100, 'Division-I', 2, 'petr', 3300, 1100.0);
INSERT INTO round_leader (round_id, division, placed, handle, rating, points)
VALUES (100, 'Division-II', 1, 'newbie', 1100, 700.0);

INSERT INTO round_problem (round_id, division, level, problem_name, submissions,
                           correct_percent, average_points)
VALUES (100, 'Division-I', 1, 'TwoSum', 18, 0.5, 200.25);
INSERT INTO round_problem (round_id, division, level, problem_name, submissions,
                           correct_percent, average_points)
VALUES (100, 'Division-II', 1, 'Counting', 9, 0.25, 150.0);

INSERT INTO room_assignment (round_id, coders_per_room, algorithm, by_division, by_region, final, p)
VALUES (100, 20, 1, 1, 0, 0, 2.0);

INSERT INTO language (language_id, language_name) VALUES (1, 'Java');
INSERT INTO language (language_id, language_name) VALUES (3, 'C++');
INSERT INTO language (language_id, language_name) VALUES (4, 'C#');

INSERT INTO problem (problem_id, problem_name, problem_type, difficulty, points)
VALUES (1, 'TwoSum', 'Single', 'Easy', 250);
INSERT INTO problem (problem_id, problem_name, problem_type, difficulty, points)
VALUES (2, 'Graphs', 'Single', 'Medium', 500);
INSERT INTO problem (problem_id, problem_name, problem_type, difficulty, points)
VALUES (3, 'TeamWork', 'Team', 'Hard', 1000);

INSERT INTO problem_state (problem_id, coder_id, status, my_points) VALUES (1, 7, 'Solved', 250);
INSERT INTO problem_state (problem_id, coder_id, status, my_points) VALUES (2, 7, 'Viewed', 0);

INSERT INTO round_component (round_id, problem_id, division, level, points)
VALUES (103, 1, 'Division-I', 1, 250);
INSERT INTO round_component (round_id, problem_id, division, level, points)
VALUES (104, 1, 'Division-I', 1, 250)
"""


def _segments() -> str:
    """Five phases per round, one month apart per round."""
    statements = []
    for month, round_id in enumerate([100, 101, 102, 103, 104], start=1):
        day = f"2014-{month:02d}-10"
        phases = [
            ("08:00", "10:00"),
            ("10:05", "11:20"),
            ("11:20", "11:25"),
            ("11:25", "11:40"),
            ("11:45", "12:30"),
        ]
        for segment_id, (start, end) in enumerate(phases, start=1):
            statements.append(
                "INSERT INTO round_segment (round_id, segment_id, start_time, end_time) "
                f"VALUES ({round_id}, {segment_id}, '{day} {start}:00', '{day} {end}:00')"
            )
    return ";\n".join(statements)


@pytest.fixture(autouse=True)
def builtins_registered():
    """Validators and handlers are registered at application startup."""
    register_builtin_validators()
    register_builtin_handlers()


@pytest.fixture
def db_config(tmp_path) -> DatabaseConfig:
    return DatabaseConfig(f"sqlite:///{tmp_path / 'rounds.db'}")


@pytest.fixture
def seeded_store(db_config):
    """Connected data access over a store holding the reference schema and seed rows."""
    data_access = SQLAlchemyDataAccess(db_config)
    data_access.connect()
    data_access.apply_script(SCHEMA_FILE.read_text())
    data_access.apply_script(SEED_SQL)
    data_access.apply_script(_segments())
    yield data_access
    data_access.close()
