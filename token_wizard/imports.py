# Import directives: matching, path normalisation and file lookup

import logging
import os
import posixpath
import re
from typing import Dict, Iterator, List, Optional

from . import consts

# A whole import directive, including its trailing line break. Handles
#   import "path";
#   import "path" as symbolName;
#   import * as symbolName from "path";
#   import {symbol1 as alias, symbol2} from "path";
# The brace list of the last form may span several lines. A directive starts
# a line or follows the `;` of a previous statement on the same line.
RE_IMPORT = re.compile(r'''(?:^|(?<=;))[ \t]*import\s+
                           (?:(?:\{[^}]*\}|\*\s+as\s+\w+|\w+)\s+from\s+)?
                           ['"](?P<path>[^'"]+)['"]
                           (?:\s+as\s+\w+)?
                           \s*;(?:[ \t]*(?:\r?\n|$))?''', re.MULTILINE | re.VERBOSE)


def to_simple_name(path: str) -> str:
    '''
    Returns a filename by removing any path prefixes
    '''
    return path.split(r'/')[-1]


def normalize_import(path: str, importer: Optional[str] = None) -> str:
    '''
    Resolve a relative import (`./` or `../`) against the path of the file
    containing it. Other paths are returned unchanged.
    '''
    if importer and (path.startswith('./') or path.startswith('../')):
        return posixpath.normpath(posixpath.join(posixpath.dirname(importer), path))
    return path


def import_paths(source: str, importer: Optional[str] = None) -> Iterator[str]:
    '''
    Normalised paths of all import directives in `source`, in order of appearance
    '''
    for m in RE_IMPORT.finditer(source):
        yield normalize_import(m.group('path'), importer)


class ImportResolver():
    '''
    Looks up imported solidity files on the file system.

    `package_paths` maps an import prefix to a directory, by default the
    shared contract library prefix maps to `consts.OPENZEPPELIN_PATH`. Any
    other path is tried as given and then below each of `include_paths`.
    '''
    def __init__(self, package_paths: Optional[Dict[str, str]] = None,
                 include_paths: Optional[List[str]] = None) -> None:
        if package_paths is None:
            package_paths = {consts.OPENZEPPELIN_PREFIX: consts.OPENZEPPELIN_PATH}
        self.package_paths = package_paths
        self.include_paths = [p.rstrip('/') for p in include_paths or []]

    def candidates(self, path: str) -> List[str]:
        for prefix, directory in self.package_paths.items():
            if path.startswith(prefix):
                return [os.path.join(directory, path[len(prefix):].lstrip('/'))]
        return [path] + [os.path.join(include_path, path) for include_path in self.include_paths]

    def __call__(self, path: str) -> Optional[str]:
        for candidate in self.candidates(path):
            if not os.path.isfile(candidate):
                continue
            try:
                with open(candidate, 'r', encoding='utf-8') as f:
                    return f.read()
            except (OSError, UnicodeDecodeError) as e:
                logging.warning(f'Cannot read import file {candidate}: {e}')
                return None
        logging.debug(f'Import not found on disk: {path}')
        return None
