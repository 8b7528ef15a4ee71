import os
import sys

sys.path.append(os.path.join(os.path.dirname(__file__), ".."))

from utils import s3_utils
from utils.share_targets import DirectoryShareTarget, S3ShareTarget, get_share_target


def test_directory_target_moves_pdf(tmp_path):
    source = tmp_path / "work" / "catalog.pdf"
    source.parent.mkdir()
    source.write_bytes(b"%PDF-1.4")
    target = DirectoryShareTarget(directory=str(tmp_path / "exports"))

    location = target.share(str(source))

    assert location == os.path.abspath(str(tmp_path / "exports" / "catalog.pdf"))
    assert not source.exists()
    assert target.last_location == location
    assert target.last_attachments == []


def test_s3_target_uploads_and_presigns(tmp_path, monkeypatch):
    pdf = tmp_path / "catalog.pdf"
    pdf.write_bytes(b"%PDF-1.4")
    calls = []

    def fake_upload(file_path, prefix="catalogs", content_type="application/pdf"):
        calls.append((file_path, prefix, content_type))
        return "s3://docs/catalogs/x_catalog.pdf"

    def fake_presign(s3_path, expires_in=3600):
        return f"https://signed.example/{s3_path[5:]}?ttl={expires_in}"

    monkeypatch.setattr(s3_utils, "upload_document_to_s3", fake_upload)
    monkeypatch.setattr(s3_utils, "generate_presigned_download_url", fake_presign)

    location = S3ShareTarget(prefix="links", expires_in=60).share(str(pdf))

    assert calls == [(str(pdf), "links", "application/pdf")]
    assert location == "https://signed.example/docs/catalogs/x_catalog.pdf?ttl=60"


def test_directory_target_moves_attachments(tmp_path):
    work = tmp_path / "work"
    work.mkdir()
    pdf = work / "catalog.pdf"
    pdf.write_bytes(b"%PDF-1.4")
    page = work / "catalog.html"
    page.write_text("<html></html>", encoding="utf-8")
    target = DirectoryShareTarget(directory=str(tmp_path / "exports"))

    target.share(str(pdf), attachments=[str(page)])

    assert target.last_attachments == [os.path.abspath(str(tmp_path / "exports" / "catalog.html"))]
    assert not page.exists()


def test_s3_target_uploads_html_with_its_content_type(tmp_path, monkeypatch):
    pdf = tmp_path / "catalog.pdf"
    pdf.write_bytes(b"%PDF-1.4")
    page = tmp_path / "catalog.html"
    page.write_text("<html></html>", encoding="utf-8")
    content_types = []

    def fake_upload(file_path, prefix="catalogs", content_type="application/pdf"):
        content_types.append(content_type)
        return f"s3://docs/{prefix}/{os.path.basename(file_path)}"

    monkeypatch.setattr(s3_utils, "upload_document_to_s3", fake_upload)
    monkeypatch.setattr(s3_utils, "generate_presigned_download_url", lambda s3_path, expires_in=3600: s3_path)

    target = S3ShareTarget()
    target.share(str(pdf), attachments=[str(page)])

    assert content_types == ["application/pdf", "text/html; charset=utf-8"]
    assert target.last_attachments == ["s3://docs/catalogs/catalog.html"]


def test_share_target_follows_bucket_setting(monkeypatch):
    monkeypatch.setattr(s3_utils, "S3_BUCKET_NAME", "")
    assert isinstance(get_share_target(), DirectoryShareTarget)

    monkeypatch.setattr(s3_utils, "S3_BUCKET_NAME", "docs")
    assert isinstance(get_share_target(prefix="links"), S3ShareTarget)


def test_resolve_public_url(monkeypatch):
    monkeypatch.setattr(s3_utils, "S3_PUBLIC_BASE_URL", "")
    monkeypatch.setattr(s3_utils, "S3_IMAGES_BUCKET", "tissue-images")
    monkeypatch.setattr(s3_utils, "AWS_REGION", "sa-east-1")

    assert s3_utils.resolve_public_url("https://cdn.example/a.jpg") == "https://cdn.example/a.jpg"
    assert s3_utils.resolve_public_url(None) is None
    assert s3_utils.resolve_public_url("links/verde 1.jpg") == (
        "https://tissue-images.s3.sa-east-1.amazonaws.com/links/verde%201.jpg"
    )

    monkeypatch.setattr(s3_utils, "S3_PUBLIC_BASE_URL", "https://storage.example/public/")
    assert s3_utils.resolve_public_url("/links/a.jpg") == "https://storage.example/public/links/a.jpg"
