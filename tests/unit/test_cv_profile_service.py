"""Tests for CvProfileService."""

import pytest

from grh.core.errors import ValidationError
from grh.services.cv_profile_service import CvProfileService
from tests.conftest import MINIMAL_PDF


@pytest.fixture
def service(repos, blob_store) -> CvProfileService:
    return CvProfileService(repos, blob_store)


class TestCvProfiles:
    @pytest.mark.asyncio
    async def test_create_with_file(self, service, candidate, blob_store):
        """The CV file should be stored and described on the profile."""
        profile = await service.create(
            candidate,
            {"name": "Backend CV", "profession": "Developer", "skills": ["python"]},
            cv_content=MINIMAL_PDF,
            cv_filename="cv.pdf",
            cv_mimetype="application/pdf",
        )

        assert profile.user_id == candidate.user_id
        assert (profile.cv_filename, profile.cv_size) == ("cv.pdf", len(MINIMAL_PDF))
        assert (await blob_store.get(profile.cv_file_handle)).data == MINIMAL_PDF

    @pytest.mark.asyncio
    async def test_create_without_file(self, service, candidate):
        """A profile without a file should have no handle."""
        profile = await service.create(
            candidate, {"name": "CV", "profession": "Tester", "skills": ["qa"]}
        )
        assert profile.cv_file_handle is None

    @pytest.mark.asyncio
    async def test_all_violations_reported(self, service, candidate):
        """Every missing field should be reported at once."""
        with pytest.raises(ValidationError) as exc_info:
            await service.create(candidate, {"skills": []})
        fields = {d["field"] for d in exc_info.value.details}
        assert fields == {"name", "profession", "skills"}

    @pytest.mark.asyncio
    async def test_blank_skill(self, service, candidate):
        """Blank skills should be refused."""
        with pytest.raises(ValidationError, match="Skills cannot be empty"):
            await service.create(
                candidate, {"name": "CV", "profession": "Dev", "skills": ["python", " "]}
            )

    @pytest.mark.asyncio
    async def test_list_mine(self, service, candidate, company, cv_profile):
        """Only the actor's profiles should be listed."""
        assert [p.id for p in await service.list_mine(candidate)] == [cv_profile.id]
        assert await service.list_mine(company) == []
