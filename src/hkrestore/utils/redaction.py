from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Redactor:
    enabled: bool = True

    def redact_ip(self, ip: str | None) -> str:
        if ip is None:
            return ""
        if not self.enabled:
            return ip
        parts = ip.split(".")
        if len(parts) == 4 and all(part.isdigit() for part in parts):
            return f"x.x.x.{parts[3]}"
        if ":" in ip:
            return "x:x:x:x"
        return ip

    def redact_code(self, code: str) -> str:
        if not self.enabled:
            return code
        # Keep the first three digits so codes stay distinguishable.
        shown = 0
        masked = []
        for ch in code:
            if ch.isdigit():
                masked.append(ch if shown < 3 else "*")
                shown += 1
            else:
                masked.append(ch)
        return "".join(masked)
