import pytest

from lawsearch.catalog_build import Catalogs
from lawsearch.config import ResourceEntry, TypeTag
from lawsearch.pipeline import build_context


def _external(name, aliases=(), url=None, description=None):
    return ResourceEntry(
        name=name,
        aliases=tuple(aliases),
        url=url,
        description=description,
        type_tag=TypeTag.EXTERNAL_DATABASE,
    )


@pytest.fixture
def external_entries():
    return (
        _external("Westlaw", aliases=("Westlaw Edge",), url="westlaw.com", description="Case law and statutes."),
        _external("HeinOnline", aliases=("Hein",), url="https://home.heinonline.org", description="Law journals."),
        _external("Bloomberg Law", url="https://www.bloomberglaw.com"),
        _external("Utah Code Annotated", aliases=("Utah statutes",), url="https://le.utah.gov"),
        _external("Kluwer Arbitration", url="https://www.kluwerarbitration.com"),
        _external("Water Rights Database", aliases=("Utah water rights",), url="https://waterrights.utah.gov"),
    )


@pytest.fixture
def guide_entries():
    return (
        ResourceEntry(
            name="Contract Law",
            aliases=("Contracts",),
            url="https://guides.law.byu.edu/contracts",
            description="Research guide for contracts.",
            type_tag=TypeTag.LOCAL_GUIDE,
        ),
        ResourceEntry(
            name="Water Law",
            url="https://guides.law.byu.edu/water",
            type_tag=TypeTag.LOCAL_GUIDE,
        ),
        ResourceEntry(
            name="Afghanistan Water Law",
            url="https://guides.law.byu.edu/afghan-water",
            type_tag=TypeTag.LOCAL_GUIDE,
        ),
        ResourceEntry(
            name="Westlaw",
            description="How to search Westlaw.",
            type_tag=TypeTag.LOCAL_GUIDE,
        ),
    )


@pytest.fixture
def asset_entries():
    return (
        ResourceEntry(
            name="Utah Water Rights Handbook",
            aliases=("water rights",),
            url="https://guides.law.byu.edu/assets/water-handbook",
            type_tag=TypeTag.LIBGUIDE_ASSET,
        ),
        ResourceEntry(
            name="Tax Research Checklist",
            type_tag=TypeTag.LIBGUIDE_ASSET,
        ),
    )


@pytest.fixture
def catalogs(external_entries, guide_entries, asset_entries):
    return Catalogs(
        external=external_entries,
        local_guides=guide_entries,
        local_assets=asset_entries,
    )


@pytest.fixture
def context(catalogs):
    return build_context(catalogs)
