from liaise.services.extraction import (
    DOCX_MIME,
    extract_docx_text,
    extract_pdf_text,
    extract_text_from_file,
    guess_mime_type,
    validate_upload,
)

SENTENCE = "The patient was admitted with chest pain and discharged in stable condition today"


def test_plain_text_is_returned_unchanged():
    data = "Short note.\nSecond line.".encode()

    result = extract_text_from_file("note.txt", data, "text/plain")

    assert result.text == "Short note.\nSecond line."
    assert result.is_placeholder is False


def test_pdf_text_objects_are_collected():
    pdf = (
        b"%PDF-1.4\n1 0 obj\nstream\n"
        b"BT /F1 12 Tf (" + SENTENCE.encode() + b") Tj ET\n"
        b"BT [(Follow ) -250 (up in two weeks with \\(cardiology\\).)] TJ ET\n"
        b"endstream\n%%EOF"
    )

    text = extract_pdf_text(pdf)

    assert SENTENCE in text
    assert "Follow up in two weeks with (cardiology)." in text


def test_pdf_with_too_little_text_becomes_placeholder():
    pdf = b"%PDF-1.4\nBT (Hi) Tj ET\n%%EOF"

    result = extract_text_from_file("scan.pdf", pdf, "application/pdf")

    assert result.is_placeholder is True
    assert "scan.pdf" in result.text


def test_pdf_with_enough_text_is_prefixed_with_kind_and_name():
    pdf = b"BT (" + SENTENCE.encode() + b") Tj ET"

    result = extract_text_from_file("discharge.pdf", pdf, "application/pdf")

    assert result.is_placeholder is False
    assert result.text.startswith("PDF Document Content from discharge.pdf:")
    assert SENTENCE in result.text


def test_docx_runs_are_joined():
    xml = (
        '<w:document><w:body><w:p><w:r><w:t>The patient was admitted</w:t></w:r>'
        '<w:r><w:t xml:space="preserve"> with chest pain</w:t></w:r>'
        "<w:r><w:t>and discharged in stable condition after two days</w:t></w:r>"
        "</w:p></w:body></w:document>"
    ).encode()

    text = extract_docx_text(xml)

    assert "The patient was admitted with chest pain" in text
    assert "stable condition" in text


def test_images_and_unknown_types_return_placeholders():
    image = extract_text_from_file("xray.png", b"\x89PNG....", "image/png")
    unknown = extract_text_from_file("data.bin", b"\x00\x01", "application/zip")

    assert image.is_placeholder and "xray.png" in image.text
    assert unknown.is_placeholder and "data.bin" in unknown.text


def test_binary_garbage_never_raises():
    result = extract_text_from_file("broken.doc", bytes(range(256)) * 4, "application/msword")

    assert result.is_placeholder is True


def test_guess_mime_type_prefers_declared_type():
    assert guess_mime_type("a.pdf", "application/pdf; charset=binary") == "application/pdf"
    assert guess_mime_type("letter.docx", "application/octet-stream") == DOCX_MIME
    assert guess_mime_type("notes.txt") == "text/plain"


def test_validate_upload_rejects_size_and_type():
    allowed = ["application/pdf"]

    assert validate_upload("application/pdf", 10, max_size=100, allowed_mime_types=allowed) is None
    assert "less than" in validate_upload(
        "application/pdf", 101, max_size=100, allowed_mime_types=allowed
    )
    assert validate_upload(
        "application/zip", 10, max_size=100, allowed_mime_types=allowed
    ) == "File type not supported"
