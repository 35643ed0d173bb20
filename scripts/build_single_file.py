#!/usr/bin/env python3
# Park - declarative dotfile symlink manager
# Copyright (C) 2025 Istvan Sarandi
# SPDX-License-Identifier: GPL-3.0-or-later

"""
Build a single-file executable from the park modules.

This script concatenates the park modules into one executable Python
script that can be dropped into ~/bin without installation.
"""

from __future__ import annotations

import re
import sys
from pathlib import Path

# Order matters: dependencies must come before dependents
PARK_MODULES = ["types", "util", "config", "selector", "trie", "tree", "printer", "cli"]

COPYRIGHT_HEADER = """\
# Park - declarative dotfile symlink manager
#   Copyright (C) 2025 Istvan Sarandi
#
# Park is free software: you can redistribute it and/or modify it
# under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# Park is distributed in the hope that it will be useful, but
# WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the GNU
# General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program. If not, see https://www.gnu.org/licenses/.

# AUTO-GENERATED from park modules - do not edit directly.
# Run scripts/build_single_file.py to regenerate.
"""

PARK_DOCSTRING = '''
"""
park - declarative dotfile symlink manager

SYNOPSIS:
    park [ options ] [ tag | target ... ]

DESCRIPTION:
    Park reads the dotfiles to manage from a TOML file, previews where
    their symlinks go and, with --link, creates them.
"""
'''

FOOTER = """

if __name__ == "__main__":
    main()
"""


def extract_imports(content: str) -> tuple[set[str], str]:
    """
    Extract standard library imports and remove park imports.

    Returns (stdlib_imports, cleaned_content).
    """
    stdlib_imports: set[str] = set()

    # Remove multi-line park imports: from park.xxx import (\n...\n)
    content = re.sub(r"from park\.\w+ import \([^)]+\)\n?", "", content, flags=re.DOTALL)
    # Remove single-line park imports
    content = re.sub(r"^from park\.\w+ import [^\n]+\n", "", content, flags=re.MULTILINE)
    content = re.sub(r"^import park[^\n]*\n", "", content, flags=re.MULTILINE)

    cleaned_lines: list[str] = []

    for line in content.split("\n"):
        if match := re.match(r"^(from \S+ import .+|import \S+)", line):
            import_line = match.group(1)
            # __future__ imports go into the header
            if "from __future__" in import_line:
                continue
            stdlib_imports.add(import_line)
            continue

        cleaned_lines.append(line)

    return stdlib_imports, "\n".join(cleaned_lines)


def remove_module_docstring(content: str) -> str:
    """Remove the module-level docstring."""
    pattern = r'^(\s*#[^\n]*\n)*\s*"""[\s\S]*?"""\s*\n'
    return re.sub(pattern, "", content, count=1)


def remove_copyright_header(content: str) -> str:
    """Remove the copyright header comments."""
    result_lines: list[str] = []
    in_header = True

    for line in content.split("\n"):
        if in_header:
            if line.startswith("#") or line.strip() == "":
                continue
            in_header = False
        result_lines.append(line)

    return "\n".join(result_lines)


def build_executable(
    modules: list[str],
    output_name: str,
    docstring: str,
    project_root: Path,
) -> Path:
    """Build a single-file executable from the given modules."""
    park_dir = project_root / "src" / "park"
    output_file = project_root / "bin" / output_name

    all_imports: set[str] = set()
    module_contents: list[str] = []

    for module_name in modules:
        module_path = park_dir / f"{module_name}.py"
        if not module_path.exists():
            print(f"Error: Module not found: {module_path}", file=sys.stderr)
            sys.exit(1)

        imports, content = extract_imports(module_path.read_text())
        all_imports.update(imports)

        content = remove_copyright_header(content)
        content = remove_module_docstring(content)
        content = re.sub(r"\nif __name__ == ['\"]__main__['\"]:\n    main\(\)\n?", "", content)

        section_header = f"\n\n{'#' * 78}\n# From park/{module_name}.py\n{'#' * 78}\n\n"
        module_contents.append(section_header + content.strip())

    output_parts = [
        "#!/usr/bin/env python3",
        "# -*- coding: utf-8 -*-",
        "",
        COPYRIGHT_HEADER,
        docstring,
        "from __future__ import annotations",
        "",
    ]

    sorted_imports = sorted(all_imports, key=lambda x: (not x.startswith("import "), x.lower()))
    output_parts.append("\n".join(sorted_imports))
    output_parts.extend(module_contents)
    output_parts.append(FOOTER)

    output_content = "\n".join(output_parts)
    output_content = re.sub(r"\n{4,}", "\n\n\n", output_content)

    output_file.parent.mkdir(exist_ok=True)
    output_file.write_text(output_content)
    output_file.chmod(0o755)

    print(f"Built: {output_file}")
    print(f"  Modules: {', '.join(modules)}")
    print(f"  Imports: {len(all_imports)}")
    print(f"  Lines: {len(output_content.splitlines())}")
    return output_file


def build() -> None:
    """Build the park single-file executable."""
    project_root = Path(__file__).parent.parent
    build_executable(PARK_MODULES, "park", PARK_DOCSTRING, project_root)


if __name__ == "__main__":
    build()
