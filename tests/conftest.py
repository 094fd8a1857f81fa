"""Shared test fixtures."""

import pytest

from viewstack.core.config import RenderConfig, reset_config
from viewstack.elements import PreparableElement


class CountingElement(PreparableElement):
    """Preparable stub that records every prepare_element call."""

    def __init__(self, name=None, options=None):
        super().__init__(name, options)
        self.owners = []

    def prepare_element(self, owner):
        self.owners.append(owner)


@pytest.fixture
def fresh_config(tmp_path, monkeypatch):
    """Never let a cached config, or the user's own config file, leak into tests."""
    monkeypatch.setenv("VIEWSTACK_CONFIG", str(tmp_path / "viewstack.json"))
    reset_config()
    yield
    reset_config()


@pytest.fixture
def counting_element():
    """Factory for CountingElement stubs."""
    return CountingElement


@pytest.fixture
def render_config():
    """Default render settings, independent of any config file."""
    return RenderConfig()


@pytest.fixture
def profile_config():
    """Nested view config: a profile view with two fields and a sub-view."""
    return {
        "name": "profile",
        "type": "view",
        "title": "Profile",
        "attributes": {"id": "profile"},
        "elements": [
            {"name": "email", "label": "E-mail", "title": "Your e-mail"},
            {
                "spec": {
                    "name": "password",
                    "label": "secret",
                    "options": {"isPassword": True},
                },
                "flags": {"priority": 10},
            },
            {
                "name": "address",
                "elements": [
                    {"name": "street", "label": "Street"},
                    {"name": "city", "label": "City"},
                ],
            },
        ],
    }


@pytest.fixture
def definitions_dir(tmp_path):
    """Directory of YAML definitions laid out as kind/name.yaml."""
    pages = tmp_path / "pages"
    pages.mkdir()
    (pages / "profile.yaml").write_text(
        "title: Profile\n"
        "elements:\n"
        "  - name: email\n"
        "    label: E-mail\n"
        "  - spec:\n"
        "      name: avatar\n"
        "      title: Avatar\n"
        "    flags:\n"
        "      priority: 5\n"
    )
    fields = tmp_path / "fields"
    fields.mkdir()
    (fields / "search.yml").write_text("name: q\ntype: input\nlabel: Search\n")
    (tmp_path / "footer.yaml").write_text("name: footer\ntitle: Footer\n")
    return tmp_path
