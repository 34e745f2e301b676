import pytest

from tonemask.features.span_detection.data.classifiers import (
    normalize_text, DigitRunClassifier, get_classifiers, SSN, PHONE_NUMBER, CREDIT_CARD, BANK_ACCOUNT
)
from tonemask.features.span_detection.data.text_redactor import redact_text


def test_normalize_text():
    assert normalize_text("(555) 123-4567.") == "555 123-4567"
    assert normalize_text("  Hello,   World! ") == "hello world"


@pytest.mark.parametrize("classifier, text", [
    (SSN, "123-45-6789"),
    (SSN, "123 45 6789"),
    (PHONE_NUMBER, "555 123 4567"),
    (CREDIT_CARD, "4111-1111-1111-1111"),
    (BANK_ACCOUNT, "12345678901"),
])
def test_identifier_patterns_match(classifier, text):
    assert classifier.matches(text)


def test_identifier_patterns_ignore_short_numbers():
    for classifier in (SSN, PHONE_NUMBER, CREDIT_CARD, BANK_ACCOUNT):
        assert not classifier.matches("call me at 42")


def test_digit_run_allows_separators():
    classifier = DigitRunClassifier(4)

    assert classifier.matches("12 34")
    assert classifier.matches("1-2-3-4")
    assert not classifier.matches("123")
    assert not classifier.matches("12 ab 34")

    with pytest.raises(ValueError):
        DigitRunClassifier(0)


def test_get_classifiers_by_name():
    resolved = get_classifiers(["ssn", "digit_run:6"])

    assert resolved[0] is SSN
    assert isinstance(resolved[1], DigitRunClassifier)
    assert resolved[1].min_digits == 6

    with pytest.raises(ValueError, match="Unknown classifier"):
        get_classifiers(["passport"])


def test_redact_text_marks_each_match():
    text = "call 555-123-4567 now, ssn 123-45-6789"

    redacted = redact_text(text)

    assert redacted == "call [REDACTED PHONE_NUMBER] now, ssn [REDACTED SSN]"


def test_redact_text_without_matches_is_unchanged():
    assert redact_text("nothing to see here") == "nothing to see here"
