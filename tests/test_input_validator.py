import pytest

from voting_backend.security.input_validator import InputValidator


@pytest.fixture
def validator():
    return InputValidator()


def test_sanitize_input_escapes_html(validator):
    assert validator.sanitize_input('<script>') == '&lt;script&gt;'
    assert validator.sanitize_input('a & b') == 'a &amp; b'
    assert validator.sanitize_input('"quoted"') == '&quot;quoted&quot;'
    assert validator.sanitize_input("it's") == 'it&#x27;s'


def test_sanitize_input_trims_whitespace(validator):
    assert validator.sanitize_input('  booth1  ') == 'booth1'


def test_sanitize_input_non_string_is_empty(validator):
    assert validator.sanitize_input(None) == ''
    assert validator.sanitize_input(123) == ''
    assert validator.sanitize_input(['a']) == ''


@pytest.mark.parametrize('username', ['booth1', 'abc', 'Booth_2', 'room-six', 'a' * 20])
def test_validate_username_accepts_valid(validator, username):
    result = validator.validate_username(username)
    assert result.valid is True
    assert result.error is None


def test_validate_username_required(validator):
    for value in (None, '', 42):
        result = validator.validate_username(value)
        assert result.valid is False
        assert result.error == 'Username is required'


def test_validate_username_length(validator):
    assert validator.validate_username('ab').error == 'Username must be between 3 and 20 characters'
    assert validator.validate_username('a' * 21).error == 'Username must be between 3 and 20 characters'


def test_validate_username_characters(validator):
    result = validator.validate_username('booth 1')
    assert result.valid is False
    assert result.error == 'Username can only contain letters, numbers, underscores, and hyphens'
    assert validator.validate_username('booth<1>').valid is False


def test_password_strength_valid(validator):
    result = validator.check_password_strength('Str0ng!Pass')
    assert result.valid is True
    assert result.errors == []


def test_password_strength_reports_every_violation(validator):
    result = validator.check_password_strength('abc')
    assert result.valid is False
    assert result.errors == [
        'Password must be at least 8 characters long',
        'Password must contain at least one uppercase letter',
        'Password must contain at least one number',
        'Password must contain at least one special character',
    ]


def test_password_strength_symbol_set(validator):
    # '#' is not one of the accepted symbols
    result = validator.check_password_strength('Abcdefg1#')
    assert result.errors == ['Password must contain at least one special character']
    assert validator.check_password_strength('Abcdefg1?').valid is True


def test_clean_text_strips_markup(validator):
    assert validator.clean_text('<b>Vision</b> for all') == 'Vision for all'
    assert validator.clean_text('Arts & Culture') == 'Arts & Culture'
    assert validator.clean_text('x' * 600, max_length=10) == 'x' * 10


def test_clean_text_rejects_non_string(validator):
    with pytest.raises(ValueError):
        validator.clean_text(None)
