# voting_backend/security/input_validator.py

import re
import html
from dataclasses import dataclass, field
from typing import List, Optional

import bleach

# Input validation and sanitization for booth usernames, passwords and candidate content


@dataclass
class ValidationResult:
    valid: bool
    error: Optional[str] = None


@dataclass
class PasswordStrength:
    valid: bool
    errors: List[str] = field(default_factory=list)


class InputValidator:
    USERNAME_MIN_LENGTH = 3
    USERNAME_MAX_LENGTH = 20
    PASSWORD_MIN_LENGTH = 8

    def __init__(self):
        self.patterns = {
            'username': re.compile(r'^[a-zA-Z0-9_-]+$'),
            'lowercase': re.compile(r'[a-z]'),
            'uppercase': re.compile(r'[A-Z]'),
            'digit': re.compile(r'\d'),
            'special': re.compile(r'[@$!%*?&]'),
        }

    def sanitize_input(self, input_str):
        if not isinstance(input_str, str):
            return ''
        # quote=True also escapes " and ' (as &#x27;)
        return html.escape(input_str, quote=True).strip()

    def validate_username(self, username):
        if not username or not isinstance(username, str):
            return ValidationResult(False, 'Username is required')

        sanitized = self.sanitize_input(username)
        if not self.USERNAME_MIN_LENGTH <= len(sanitized) <= self.USERNAME_MAX_LENGTH:
            return ValidationResult(
                False,
                f'Username must be between {self.USERNAME_MIN_LENGTH} and {self.USERNAME_MAX_LENGTH} characters',
            )
        if not self.patterns['username'].match(sanitized):
            return ValidationResult(False, 'Username can only contain letters, numbers, underscores, and hyphens')
        return ValidationResult(True)

    def check_password_strength(self, password):
        if not isinstance(password, str):
            password = ''
        errors = []
        if len(password) < self.PASSWORD_MIN_LENGTH:
            errors.append(f'Password must be at least {self.PASSWORD_MIN_LENGTH} characters long')
        if not self.patterns['lowercase'].search(password):
            errors.append('Password must contain at least one lowercase letter')
        if not self.patterns['uppercase'].search(password):
            errors.append('Password must contain at least one uppercase letter')
        if not self.patterns['digit'].search(password):
            errors.append('Password must contain at least one number')
        if not self.patterns['special'].search(password):
            errors.append('Password must contain at least one special character')
        return PasswordStrength(valid=not errors, errors=errors)

    def clean_text(self, input_str, max_length=500):
        """Strip all markup from free text such as candidate vision/mission statements."""
        if not isinstance(input_str, str):
            raise ValueError("Input must be a string")
        if len(input_str) > max_length:
            input_str = input_str[:max_length]
        # bleach returns HTML-safe text; store it unescaped since clients render it as plain text
        cleaned = bleach.clean(input_str, tags=[], attributes={}, strip=True)
        return html.unescape(cleaned).strip()
