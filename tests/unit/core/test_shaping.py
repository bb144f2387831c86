"""Tests for response shaping helpers."""

from types import SimpleNamespace

import pytest

from core.shaping import (
    club_payload,
    lower_enum,
    lower_role_document,
    map_employment_type,
    map_employment_types,
    salary_payload,
    sample_avatars,
    to_employment_type_name,
)
from database.models.jobs import EmploymentType, JobStatus


class TestEnumMapping:

    @pytest.mark.parametrize(
        "value,expected",
        [
            (JobStatus.ACTIVE, "active"),
            ("INACTIVE", "inactive"),
            (None, None),
        ],
    )
    def test_lower_enum(self, value, expected):
        assert lower_enum(value) == expected

    def test_employment_type_round_trip(self):
        assert map_employment_type(EmploymentType.FULL_TIME) == "full-time"
        assert to_employment_type_name("full-time") == "FULL_TIME"
        assert to_employment_type_name(" Part-Time ") == "PART_TIME"

    def test_map_employment_types_document(self):
        document = {"primary": "FULL_TIME", "secondary": ["PART_TIME", "CONTRACT"]}
        assert map_employment_types(document) == {
            "primary": "full-time",
            "secondary": ["part-time", "contract"],
        }

    def test_map_employment_types_empty(self):
        assert map_employment_types(None) is None

    def test_job_role_is_lowercased_without_substitution(self):
        document = {"primary": "Head_Coach", "secondary": ["Scout"]}
        assert lower_role_document(document) == {
            "primary": "head_coach",
            "secondary": ["scout"],
        }


class TestPayloads:

    def test_salary_defaults(self):
        assert salary_payload(None) == {"min": 0, "max": 0, "currency": "USD"}
        assert salary_payload({"min": 10, "currency": "EUR"}) == {
            "min": 10,
            "max": 0,
            "currency": "EUR",
        }

    def test_club_payload_fields(self):
        club = SimpleNamespace(
            id="c1",
            name="FC",
            avatar="a.png",
            banner="b.png",
            preferred_color="#fff",
            category="football",
        )
        assert club_payload(club) == {"id": "c1", "name": "FC", "avatar": "a.png"}
        assert club_payload(club, ("preferredColor", "banner")) == {
            "preferredColor": "#fff",
            "banner": "b.png",
        }

    def test_club_payload_absent(self):
        assert club_payload(None) is None
        assert (club_payload(None) or {}) == {}


class TestSampleAvatars:

    def test_groups_and_caps(self):
        rows = [SimpleNamespace(job_id="j1", avatar=f"a{i}") for i in range(15)]
        rows.append(SimpleNamespace(job_id="j2", avatar="b0"))
        grouped = sample_avatars(rows, "job_id", per_group=12)
        assert len(grouped["j1"]) == 12
        assert grouped["j1"][0] == "a0"
        assert grouped["j2"] == ["b0"]

    def test_rows_without_avatar_are_skipped(self):
        rows = [SimpleNamespace(job_id="j1", avatar=None), SimpleNamespace(job_id="j1", avatar="")]
        assert sample_avatars(rows, "job_id") == {}
