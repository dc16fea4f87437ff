from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Redactor:
    enabled: bool = True

    def redact_ip(self, ip: str) -> str:
        if not self.enabled:
            return ip
        parts = ip.split(".")
        if len(parts) == 4 and all(part.isdigit() for part in parts):
            return f"x.x.x.{parts[3]}"
        return ip
