# -*- coding: utf-8 -*-

"""

@author: Will D

"""

# This is the report module. This module will allow the application to:

# 1. Format each finding as a fixed-width "type mode owner group path" line

# 2. Print the per-category listings (headers on stderr, findings on stdout)

# 3. Build a JSON-friendly dictionary of the whole scan

# 4. Write a text or JSON report to a file

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Dict, List

from PhantomScan import __version__

from .colors import Palette, apply_color
from .findings import Category, Finding, FindingStore
from .identity import Identity, describe_identity
from .traversal import ScanStats
from .utils import octal_mode, owner_names

### Categories worth shouting about
_HIGHLIGHT = {Category.SETUID, Category.SETGID}

###########################################################################

"""

Name: format_finding

Function: One report line: type right-aligned to nine columns, four octal

permission digits, owner, group and the path.

Arguments: finding - the Finding to format

Returns: The formatted line

"""

def format_finding(finding: Finding) -> str:
    snapshot = finding.snapshot
    owner, group = owner_names(snapshot.uid, snapshot.gid)
    return f"    {snapshot.entry_type:>9} {octal_mode(snapshot.permissions)} {owner} {group} {finding.path}"

#$ End format_finding

def category_header(store: FindingStore, category: Category) -> str:
    return f"[*] Found {len(store.findings(category))} entries that are {category.label}"

###########################################################################

"""

Name: render_text

Function: The whole report as plain lines, one header per category followed

by its findings in discovery order.

Arguments: store - the FindingStore to render

Returns: List of lines (no trailing newlines)

"""

def render_text(store: FindingStore) -> List[str]:
    lines: List[str] = []
    for category in store.categories():
        lines.append(category_header(store, category))
        lines.extend(format_finding(finding) for finding in store.findings(category))
    return lines

#$ End render_text

###########################################################################

"""

Name: emit_report

Function: Print the report to the console. Headers go to stderr and findings

to stdout, so "phantomscan / > hits.txt" keeps only the findings.

Arguments: store - the FindingStore to print

Returns: No value returned

"""

def emit_report(store: FindingStore) -> None:
    for category in store.categories():
        header = category_header(store, category)
        print(apply_color(header, Palette.CYAN, Palette.BOLD, stream=sys.stderr), file=sys.stderr)
        ### setuid / setgid hits get a colour of their own
        codes = (Palette.MAGENTA,) if category in _HIGHLIGHT else ()
        for finding in store.findings(category):
            print(apply_color(format_finding(finding), *codes))

#$ End emit_report

###########################################################################

"""

Name: finding_to_dict

Function: Converts a Finding into a dictionary for JSON output.

Arguments: finding - The Finding object to convert

Returns: Dictionary representation of the finding

"""

def finding_to_dict(finding: Finding) -> Dict[str, object]:
    snapshot = finding.snapshot
    owner, group = owner_names(snapshot.uid, snapshot.gid)
    return {
        "path": finding.path,
        "type": snapshot.entry_type,
        "mode": octal_mode(snapshot.permissions),
        "uid": snapshot.uid,
        "gid": snapshot.gid,
        "owner": owner,
        "group": group,
    }

#$ End finding_to_dict

###########################################################################

"""

Name: report_to_dict

Function: Everything about a scan in one dictionary: who we simulated, what

we found per category, and the counters.

Arguments: identity - the simulated Identity

            store - the FindingStore with the results

            stats - the ScanStats for the run

Returns: Dictionary ready for json.dumps

"""

def report_to_dict(identity: Identity, store: FindingStore, stats: ScanStats) -> Dict[str, object]:
    return {
        "tool": "PhantomScan",
        "version": __version__,
        "identity": {
            "uid": identity.uid,
            "name": identity.name,
            "groups": list(identity.groups),
            "summary": describe_identity(identity),
        },
        "extended": store.extended,
        "counts": {category.value: count for category, count in store.counts().items()},
        "categories": [
            {
                "category": category.value,
                "label": category.label,
                "findings": [finding_to_dict(finding) for finding in store.findings(category)],
            }
            for category in store.categories()
        ],
        "stats": {
            "roots_scanned": stats.roots_scanned,
            "roots_failed": stats.roots_failed,
            "directories": stats.directories,
            "entries": stats.entries,
            "symlinks_skipped": stats.symlinks_skipped,
            "errors": stats.errors,
        },
    }

#$ End report_to_dict

###########################################################################

"""

Name: write_report

Function: Writes the report to a file in the specified format (JSON or text).

Arguments: report - the dictionary from report_to_dict

            store - the FindingStore (for the text layout)

            path - Where to write the file

            fmt - Format to use ("json" or "text")

Returns: No value returned

"""

def write_report(report: Dict[str, object], store: FindingStore, path: Path, fmt: str) -> None:
    if fmt == "json":
        payload = json.dumps(report, indent=2)
    else:
        payload = "\n".join([f"[*] {report['identity']['summary']}"] + render_text(store))
    ### Make sure the directory exists (create it if it doesn't)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(payload + "\n", encoding="utf-8")

#$ End write_report
