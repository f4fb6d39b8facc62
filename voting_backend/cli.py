# voting_backend/cli.py

# Flask CLI commands: `flask --app voting_backend seed` and `flask --app voting_backend hash-password`

import click
from flask import current_app

from voting_backend.database.seed import seed_candidates, load_candidates_file
from voting_backend.encryption.password_hashing import PasswordHashingService
from voting_backend.security.input_validator import InputValidator


def register_commands(app):
    @app.cli.command('seed')
    @click.option('--file', 'path', type=click.Path(exists=True, dir_okay=False),
                  help='JSON list of candidates; defaults to the built-in slate.')
    @click.option('--keep-audit', is_flag=True, help='Keep existing audit entries.')
    def seed(path, keep_audit):
        """Replace the candidate list and reload the election state."""
        candidates = load_candidates_file(path) if path else None
        count = seed_candidates(candidates, reset=not keep_audit)
        current_app.extensions['election'].reset()
        click.echo(f"Seeded {count} candidates.")

    @app.cli.command('hash-password')
    @click.password_option()
    def hash_password(password):
        """Print an Argon2 hash for ADMIN_PASSWORD_HASH or a booth account."""
        validator = InputValidator()
        service = PasswordHashingService(validator)
        strength = validator.check_password_strength(password)
        if not strength.valid:
            raise click.ClickException(
                "Password does not meet security requirements: " + "; ".join(strength.errors)
            )
        # Logins compare against the escaped form, so hash that
        try:
            hashed = service.hash_password(validator.sanitize_input(password), enforce_strength=False)
        except ValueError as e:
            raise click.ClickException(str(e))
        click.echo(hashed)
