from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]

GOOD_CONFIG = """\
inherit_mode:
  merge:
    - Exclude

AllCops:
  TargetRailsVersion: ~

Rails/ActionFilter:
  Description: 'Enforces consistent use of action filter methods.'
  Enabled: true
  EnforcedStyle: action
  SupportedStyles:
    - action
    - filter
  VersionAdded: '0.19'
  VersionChanged: '2.0'

Rails/ActiveRecordAliases:
  Description: Avoid Active Record aliases.
  Enabled: true
  SafeAutoCorrect: false
  VersionAdded: '0.53'

Rails/ShortI18n:
  Description: 'Use the short form of the I18n methods.'
  Enabled: pending
  VersionAdded: '<<next>>'
"""

GOOD_CHANGELOG = """\
# Change log

## master (unreleased)

### New features

* [#12](https://github.com/rubocop/rubocop-rails/pull/12): Add `Rails/ShortI18n` cop. ([@alice][])

### Bug fixes

* [#13](https://github.com/rubocop/rubocop-rails/issues/13): Fix a false positive for `Rails/ActionFilter`. ([@bob][], [@alice][])

## 0.1.0

* Initial release!

[@alice]: https://github.com/alice
[@bob]: https://github.com/bob
"""


def write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def run_conformctl(*args: str, cwd: Path | None = None, env: dict[str, str] | None = None) -> subprocess.CompletedProcess[str]:
    merged = os.environ.copy()
    merged["PYTHONPATH"] = str(ROOT / "src")
    merged.pop("CONFORMCTL_SETTINGS", None)
    merged.setdefault("RUN_ID", "pytest-run")
    merged.update(env or {})
    return subprocess.run(
        [sys.executable, "-m", "conformctl", *args],
        cwd=(cwd or ROOT),
        env=merged,
        text=True,
        capture_output=True,
        check=False,
    )
