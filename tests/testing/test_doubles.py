# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Tests for the session, credentials and localisation doubles."""

import json

import pytest

from testbed.platform.ports import Localisation, Session
from testbed.testing.doubles import MemorySession, ResourceBundleLocalisation, StaticLoginCredentials


class TestMemorySession:
    def test_conforms_to_port(self):
        assert isinstance(MemorySession(), Session)

    def test_get_set_remove(self):
        session = MemorySession()
        session.set("user_id", "john.doe")
        assert session.get("user_id") == "john.doe"
        assert session.exists("user_id")
        session.remove("user_id")
        assert session.get("user_id") is None
        assert not session.exists("user_id")

    def test_initial_data_is_copied(self):
        data = {"a": 1}
        session = MemorySession(data)
        session.set("b", 2)
        assert data == {"a": 1}
        assert sorted(session.keys()) == ["a", "b"]

    def test_clear(self):
        session = MemorySession({"a": 1})
        session.clear()
        assert session.keys() == []

    def test_ids(self):
        assert MemorySession(session_id="fixed").id == "fixed"
        assert MemorySession().id != MemorySession().id

    def test_closed_session_rejects_writes(self):
        session = MemorySession()
        session.close()
        assert session.closed
        with pytest.raises(RuntimeError):
            session.set("a", 1)

    def test_reopen(self):
        session = MemorySession()
        session.close()
        assert session.reopen() is True
        assert session.reopen() is False
        session.set("a", 1)
        assert session.get("a") == 1


class TestStaticLoginCredentials:
    def test_accessors(self):
        credentials = StaticLoginCredentials(uid="john.doe", password="nothing")
        assert credentials.get_uid() == "john.doe"
        assert credentials.get_login_name() == "john.doe"
        assert credentials.get_password() == "nothing"

    def test_password_optional(self):
        assert StaticLoginCredentials(uid="john.doe").get_password() is None


class TestResourceBundleLocalisation:
    def test_conforms_to_port(self, tmp_path):
        assert isinstance(ResourceBundleLocalisation(tmp_path, "testapp"), Localisation)

    def test_untranslated_text_is_returned(self, tmp_path):
        localisation = ResourceBundleLocalisation(tmp_path, "testapp")
        assert localisation.t("Save") == "Save"
        assert localisation.get_language_code() == "de"

    def test_app_bundle(self, tmp_path):
        (tmp_path / "testapp").mkdir()
        (tmp_path / "testapp" / "messages_de.yaml").write_text(
            "Save: Speichern\nerrors:\n  missing: '{0} fehlt'\n"
        )
        localisation = ResourceBundleLocalisation(tmp_path, "testapp")
        assert localisation.t("Save") == "Speichern"
        assert localisation.t("errors.missing", ("Name",)) == "Name fehlt"

    def test_app_bundle_wins_over_shared(self, tmp_path):
        (tmp_path / "testapp").mkdir()
        (tmp_path / "testapp" / "messages_fr.yml").write_text("Save: Enregistrer\n")
        (tmp_path / "messages_fr.yml").write_text("Save: Sauver\n")
        assert ResourceBundleLocalisation(tmp_path, "testapp", "fr").t("Save") == "Enregistrer"

    def test_shared_json_bundle(self, tmp_path):
        (tmp_path / "messages_de.json").write_text(json.dumps({"Save": "Speichern"}))
        assert ResourceBundleLocalisation(tmp_path, "testapp").t("Save") == "Speichern"

    def test_placeholders_without_translation(self, tmp_path):
        localisation = ResourceBundleLocalisation(tmp_path, "testapp")
        assert localisation.t("Hello {0}, {1}", ("Ann", "Bob")) == "Hello Ann, Bob"

    def test_plural(self, tmp_path):
        (tmp_path / "messages_de.yaml").write_text("'%n file': '%n Datei'\n'%n files': '%n Dateien'\n")
        localisation = ResourceBundleLocalisation(tmp_path, "testapp")
        assert localisation.n("%n file", "%n files", 1) == "1 Datei"
        assert localisation.n("%n file", "%n files", 3) == "3 Dateien"
