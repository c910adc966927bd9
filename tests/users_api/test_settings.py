"""
Environment configuration loading
"""

import pytest

from config.settings import MISSING_AGE_DEFAULT, MISSING_AGE_REJECT, load_settings


BASE_ENV = {"USER": "app", "PASSWORD": "pw", "DBNAME": "people", "PORT": "5433"}


class TestLoadSettings:

    def test_reads_database_variables(self):
        settings = load_settings(BASE_ENV)

        assert settings.db_user == "app"
        assert settings.db_password == "pw"
        assert settings.db_name == "people"
        assert settings.db_port == 5433
        assert settings.db_host == "localhost"
        assert settings.http_port == 8080
        assert settings.missing_age_policy == MISSING_AGE_DEFAULT

    def test_database_url(self):
        settings = load_settings(dict(BASE_ENV, PASSWORD="p@ss:word", DBHOST="db"))

        assert settings.database_url == "postgresql://app:p%40ss%3Aword@db:5433/people?sslmode=disable"

    def test_port_defaults_to_postgres(self):
        env = {k: v for k, v in BASE_ENV.items() if k != "PORT"}

        assert load_settings(env).db_port == 5432

    @pytest.mark.parametrize("missing", ["USER", "DBNAME"])
    def test_required_variables(self, missing):
        env = {k: v for k, v in BASE_ENV.items() if k != missing}

        with pytest.raises(ValueError, match=missing):
            load_settings(env)

    def test_invalid_port(self):
        with pytest.raises(ValueError, match="PORT"):
            load_settings(dict(BASE_ENV, PORT="abc"))

    def test_missing_age_policy(self):
        assert load_settings(dict(BASE_ENV, MISSING_AGE_POLICY="Reject")).missing_age_policy == MISSING_AGE_REJECT

        with pytest.raises(ValueError, match="MISSING_AGE_POLICY"):
            load_settings(dict(BASE_ENV, MISSING_AGE_POLICY="guess"))
