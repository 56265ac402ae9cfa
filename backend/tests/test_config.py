"""Tests for settings parsing and the project filter model."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from gradarchive.config import Settings, settings
from gradarchive.schemas.projects import ProjectFilters


class TestSettings:
    def test_dialect_detected_from_url(self):
        pg = Settings(DB_URL="postgresql+asyncpg://u:p@db:5432/archive")
        assert pg.is_postgres
        assert pg.sync_db_url() == "postgresql://u:p@db:5432/archive"

        lite = Settings(DB_URL="sqlite+aiosqlite:///./x.db")
        assert lite.is_sqlite
        assert lite.sync_db_url() == "sqlite:///./x.db"

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("API_MAX_PAGE_SIZE", "25")
        monkeypatch.setenv("EXPOSE_INTERNAL_ERRORS", "true")
        s = Settings()
        assert s.API_MAX_PAGE_SIZE == 25
        assert s.EXPOSE_INTERNAL_ERRORS is True

    def test_min_page_size_above_max_rejected(self):
        with pytest.raises(ValidationError):
            Settings(API_MIN_PAGE_SIZE=60, API_MAX_PAGE_SIZE=50)


class TestProjectFilters:
    def test_defaults(self):
        filters = ProjectFilters()
        assert filters.page == settings.API_DEFAULT_PAGE
        assert filters.page_size == settings.API_MIN_PAGE_SIZE
        assert filters.offset == 0

    def test_page_size_clamped_both_ways(self):
        assert ProjectFilters(pageSize=1000).page_size == settings.API_MAX_PAGE_SIZE
        assert ProjectFilters(pageSize=1).page_size == settings.API_MIN_PAGE_SIZE

    def test_offset(self):
        assert ProjectFilters(page=3, pageSize=20).offset == 60

    def test_negative_page_rejected(self):
        with pytest.raises(ValidationError):
            ProjectFilters(page=-1)
