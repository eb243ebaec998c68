"""
Image upload validation and storage.
"""
from io import BytesIO

import pytest
from fastapi import HTTPException, UploadFile
from starlette.datastructures import Headers

from vendorhub.services.upload_service import UploadService


def upload(content=b"\x89PNG fake", filename="logo.png", content_type="image/png", size=None, **headers):
    headers = Headers({"content-type": content_type, **headers})
    return UploadFile(file=BytesIO(content), size=size, filename=filename, headers=headers)


@pytest.fixture
def service(tmp_path):
    return UploadService(upload_dir=str(tmp_path), max_size=1024)


class TestValidation:
    def test_image_types_accepted(self, service):
        service.validate_content_type("image/jpeg")
        service.validate_content_type("image/webp")

    @pytest.mark.parametrize("content_type", ["application/pdf", "text/plain", None])
    def test_other_types_rejected(self, service, content_type):
        with pytest.raises(HTTPException) as exc_info:
            service.validate_content_type(content_type)
        assert exc_info.value.status_code == 400
        assert "Only image files are allowed" in exc_info.value.detail

    def test_size_limit(self, service):
        service.validate_size(1024)
        with pytest.raises(HTTPException):
            service.validate_size(1025)

    def test_actual_size_checked_when_length_is_unknown(self, service):
        service.validate_size(None, 1024)
        with pytest.raises(HTTPException):
            service.validate_size(None, 1025)

    def test_declared_size(self, service):
        assert service.declared_size(upload(size=10)) == 10
        assert service.declared_size(upload(**{"content-length": "2048"})) == 2048
        assert service.declared_size(upload()) is None


class TestFilenames:
    def test_unique_name_keeps_extension(self, service):
        name = service.build_filename("Shop Logo.PNG")
        assert name.startswith("Shop Logo-")
        assert name.endswith(".png")

    def test_path_components_stripped(self, service):
        name = service.build_filename("../../etc/passwd")
        assert "/" not in name
        assert name.startswith("passwd-")

    def test_names_differ(self, service):
        assert service.build_filename("a.png") != service.build_filename("a.png")


async def test_save_image_writes_file(service, tmp_path):
    url = await service.save_image(upload())
    filename = url.rsplit("/", 1)[-1]

    assert "/uploads/" in url
    assert (tmp_path / filename).read_bytes() == b"\x89PNG fake"


async def test_save_image_rejects_large_file(service, tmp_path):
    with pytest.raises(HTTPException):
        await service.save_image(upload(content=b"x" * 2048))
    assert list(tmp_path.iterdir()) == []


async def test_declared_size_rejected_before_reading(service, tmp_path):
    oversized = upload(content=b"x" * 10, size=4096)

    with pytest.raises(HTTPException) as exc_info:
        await service.save_image(oversized)

    assert exc_info.value.status_code == 400
    assert oversized.file.tell() == 0
    assert list(tmp_path.iterdir()) == []


async def test_content_length_header_rejected_before_reading(service, tmp_path):
    oversized = upload(content=b"x" * 10, **{"content-length": "4096"})

    with pytest.raises(HTTPException):
        await service.save_image(oversized)

    assert oversized.file.tell() == 0


async def test_understated_length_still_caught(service, tmp_path):
    with pytest.raises(HTTPException):
        await service.save_image(upload(content=b"x" * 2048, size=100))
    assert list(tmp_path.iterdir()) == []
