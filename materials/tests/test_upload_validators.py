from __future__ import annotations

import pytest
from django.core.exceptions import ValidationError

from materials.models import MAX_BYTES, validate_upload


class Dummy:
    def __init__(self, name, size):
        self.name = name
        self.size = size


def test_validate_upload_size_and_type():
    with pytest.raises(ValidationError, match="too large"):
        validate_upload(Dummy("x.pdf", MAX_BYTES + 1))
    with pytest.raises(ValidationError, match="Unsupported"):
        validate_upload(Dummy("x.exe", 1024))
    validate_upload(Dummy("x.pdf", 1024))
    validate_upload(Dummy("slides.PPTX", MAX_BYTES))


@pytest.mark.parametrize("name", ["notes.txt", "scan.gif", "bundle.zip", "sheet.xlsx"])
def test_office_and_archive_types_are_accepted(name):
    validate_upload(Dummy(name, 10))
