import logging
import re
from typing import Callable, Optional, Set

from . import consts
from .imports import RE_IMPORT, normalize_import
from .shared import TokenWizardError

# Lines dropped from inlined files, the outer document keeps its own
RE_LICENSE = re.compile(r'^[ \t]*//\s*SPDX-License-Identifier:[^\n]*\n?', re.MULTILINE)
RE_PRAGMA_SOLIDITY = re.compile(r'^[ \t]*pragma\s+solidity\s+[^;]+;[ \t]*\r?\n?', re.MULTILINE)

# Pragmas allowed once per source unit, only the first one is kept
DEDUPED_PRAGMAS = ('abicoder', 'ABIEncoderV2', 'SMTChecker')
RE_PRAGMA_META = re.compile(r'''^[ \t]*pragma\s+(?:experimental\s+)?['"]?
                                (?P<name>{})\b[^;\n]*;[ \t]*\r?\n?'''.format('|'.join(DEDUPED_PRAGMAS)),
                            re.MULTILINE | re.VERBOSE)

# Three or more blank lines in a row
RE_BLANK_LINES = re.compile(r'(\r?\n)(?:[ \t]*\r?\n){3,}')

ImportResolverFn = Callable[[str], Optional[str]]


class FlattenError(TokenWizardError):
    pass


class RecursionDepthExceeded(FlattenError):
    pass


def strip_meta(source: str) -> str:
    '''
    Remove license identifier and `pragma solidity` lines
    '''
    return RE_PRAGMA_SOLIDITY.sub('', RE_LICENSE.sub('', source))


def collapse_blank_lines(source: str) -> str:
    return RE_BLANK_LINES.sub(lambda m: m.group(1) * 3, source)


class FlattenSolidity():
    '''
    Inline every import of a source document, depth first. One instance
    flattens one document: `seen` remembers the import paths already
    inlined so a file reached twice (or through a cycle) is emitted once.
    '''
    def __init__(self, resolve_import: ImportResolverFn, max_depth: int = consts.MAX_IMPORT_DEPTH) -> None:
        self.resolve_import = resolve_import
        self.max_depth = max_depth
        self.seen: Set[str] = set()
        self.unresolved: Set[str] = set()
        self.seen_meta: Set[str] = set()

    def inline(self, path: str, depth: int) -> str:
        if path in self.seen:
            logging.debug(f'Skipping duplicate import {path}')
            return ''
        self.seen.add(path)

        content = self.resolve_import(path)
        if content is None:
            logging.warning(f'Import not found: {path}')
            self.unresolved.add(path)
            return f'// Import not found: {path}\n'

        content = self.flatten(content, depth + 1, importer=path)
        return strip_meta(content) + '\n'

    def flatten(self, source: str, depth: int = 0, importer: Optional[str] = None) -> str:
        '''
        Replace every import directive of `source` by the flattened content
        of the imported file. `importer` is the path of `source` itself,
        used to resolve relative imports.
        '''
        if depth > self.max_depth:
            raise RecursionDepthExceeded(f'Import recursion too deep (more than {self.max_depth} levels)')

        return RE_IMPORT.sub(
            lambda m: self.inline(normalize_import(m.group('path'), importer), depth),
            source)

    def drop_duplicate_pragma(self, m) -> str:
        name = m.group('name')
        if name in self.seen_meta:
            logging.debug(f'Dropping duplicate pragma {name}')
            return ''
        self.seen_meta.add(name)
        return m.group(0)

    def flatten_source(self, source: str) -> str:
        '''
        Flattened source code which can be passed directly to a solc compiler
        '''
        content = RE_PRAGMA_META.sub(self.drop_duplicate_pragma, self.flatten(source))
        return collapse_blank_lines(content)


def flatten(source: str, resolve_import: ImportResolverFn, max_depth: int = consts.MAX_IMPORT_DEPTH) -> str:
    '''
    Inline all imports of `source` into one self-contained document.

    `resolve_import` takes an import path and returns the file content, or
    None when the file is unknown. Unknown files are replaced by a comment.
    Raises `RecursionDepthExceeded` when imports nest deeper than `max_depth`.
    '''
    return FlattenSolidity(resolve_import, max_depth).flatten_source(source)

