"""Shared pytest fixtures."""

from __future__ import annotations

import pytest

from heorepo.auth import SharedSecretAuthenticator
from heorepo.models import Collection, Resource, WorkingCopy
from heorepo.seed import SeedDataset
from heorepo.session import CatalogSession
from heorepo.store import MemoryStore

SEED_VERSION = 100
ADMIN_SECRET = "secret"


@pytest.fixture
def seed() -> SeedDataset:
    return SeedDataset(
        version=SEED_VERSION,
        collections=(
            Collection(
                id="modelling",
                name="Modelling",
                icon="M",
                description="Economic modelling.",
                sub_categories=("Decision Tree", "Markov", "PSA"),
            ),
            Collection(
                id="meta-analysis",
                name="Meta-Analysis",
                icon="N",
                description="Evidence synthesis.",
                sub_categories=("Tutorials",),
            ),
            Collection(id="general", name="General", icon="G", description="Everything else."),
        ),
        resources=(
            Resource(
                id="a",
                title="Decision tree tutorial",
                description="Build a decision tree in R.",
                url="https://rpubs.com/decision-tree",
                domain="RPUBS.COM",
                added_date="27/01/2026",
                contributor="Admin",
                category="modelling",
                sub_category="Decision Tree",
            ),
            Resource(
                id="b",
                title="Markov models",
                description="Cohort state transition models.",
                url="https://example.org/markov",
                domain="EXAMPLE.ORG",
                added_date="27/01/2026",
                contributor="Admin",
                category="modelling",
                sub_category="Markov",
            ),
            Resource(
                id="c",
                title="HEALTHECON mailing list",
                description="Mail list of health economists.",
                url="https://www.jiscmail.ac.uk/list",
                domain="WWW.JISCMAIL.AC.UK",
                added_date="28/01/2026",
                contributor="Admin",
                category="general",
            ),
        ),
        tagline_words=("markov", "psa"),
    )


@pytest.fixture
def working_copy(seed: SeedDataset) -> WorkingCopy:
    return seed.working_copy()


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def session(store: MemoryStore, seed: SeedDataset) -> CatalogSession:
    return CatalogSession(store, seed, SharedSecretAuthenticator(ADMIN_SECRET))


@pytest.fixture
def admin_session(session: CatalogSession) -> CatalogSession:
    assert session.login(ADMIN_SECRET)
    return session
