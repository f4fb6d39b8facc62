# voting_backend/audit/audit_logger.py

import os
import json
import hashlib
import base64
import logging
from datetime import datetime, timezone
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

# Security event log: every event goes to the standard logger, and optionally to an append-only
# JSON-lines file with hash chaining and Ed25519 signatures.

logger = logging.getLogger(__name__)

SEVERITIES = ('low', 'medium', 'high', 'critical')


class AuditLogger:
    def __init__(self, log_dir='logs', enable_file_logging=True, signing_key_hex=None):
        self.log_dir = log_dir
        self.log_file = os.path.join(log_dir, 'security.log')
        self.enable_file_logging = enable_file_logging
        self.previous_hash = None

        if signing_key_hex:
            self.signing_key = Ed25519PrivateKey.from_private_bytes(bytes.fromhex(signing_key_hex))
        else:
            self.signing_key = Ed25519PrivateKey.generate()

        if self.enable_file_logging:
            os.makedirs(log_dir, exist_ok=True)
            self._load_previous_hash()

    def _load_previous_hash(self):
        if os.path.exists(self.log_file):
            with open(self.log_file, 'r') as f:
                lines = f.readlines()
                if lines:
                    try:
                        last_entry = json.loads(lines[-1])
                        self.previous_hash = last_entry.get('hash')
                    except ValueError:
                        self.previous_hash = None

    def log_security_event(self, event, details, severity='medium', session_id=None):
        if severity not in SEVERITIES:
            severity = 'medium'
        message = f"Security Event: {event}"
        if severity in ('high', 'critical'):
            logger.error("%s %s", message, details, extra={'session_id': session_id})
        else:
            logger.warning("%s %s", message, details, extra={'session_id': session_id})
        self._write_entry('security', event, dict(details, severity=severity), session_id)

    def log_audit_event(self, action, resource, details, session_id=None):
        logger.info("Audit: %s on %s %s", action, resource, details, extra={'session_id': session_id})
        self._write_entry('audit', f"{action} on {resource}", details, session_id)

    def _write_entry(self, category, event_type, data, session_id):
        if not self.enable_file_logging:
            return
        try:
            log_entry = {
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "category": category,
                "event_type": event_type,
                "data": data,
                "session_id": session_id,
                "previous_hash": self.previous_hash,
            }
            entry_json = json.dumps(log_entry, sort_keys=True)
            entry_hash = hashlib.sha256(entry_json.encode()).hexdigest()

            signature = self.signing_key.sign(entry_json.encode())
            log_entry['hash'] = entry_hash
            log_entry['signature'] = base64.b64encode(signature).decode()

            with open(self.log_file, 'a') as f:
                f.write(json.dumps(log_entry) + "\n")

            self.previous_hash = entry_hash
        except (OSError, TypeError, ValueError):
            # The security log must never break the action that triggered it
            logger.exception("Security log write failed")

    def verify_log_integrity(self):
        if not os.path.exists(self.log_file):
            return True
        public_key = self.signing_key.public_key()
        previous_hash = None
        try:
            with open(self.log_file, 'r') as f:
                for line in f:
                    if not line.strip():
                        continue
                    log_entry = json.loads(line)
                    if log_entry.get('previous_hash') != previous_hash:
                        return False
                    entry_copy = dict(log_entry)
                    signature = base64.b64decode(entry_copy.pop('signature'))
                    entry_hash = entry_copy.pop('hash')
                    entry_json = json.dumps(entry_copy, sort_keys=True).encode()
                    if hashlib.sha256(entry_json).hexdigest() != entry_hash:
                        return False
                    public_key.verify(signature, entry_json)
                    previous_hash = entry_hash
            return True
        except Exception:
            logger.warning("Security log integrity check failed", exc_info=True)
            return False
