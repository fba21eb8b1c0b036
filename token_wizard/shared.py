import functools
import logging
import re
from typing import List, Optional, Union

import semantic_version
import solcx
from Crypto.Hash import keccak

RE_NON_IDENTIFIER = re.compile(r'[^a-zA-Z0-9]')
# Leading zeros of a version component, `0.08.00` -> `0.8.0`
RE_LEADING_ZEROS = re.compile(r'\b0+(?=\d)')


class TokenWizardError(ValueError):
    pass


def keccak256(data: Union[str, bytes]) -> str:
    '''
    Hex keccak-256 digest, `str` input is hashed as utf-8
    '''
    if isinstance(data, str):
        data = data.encode('utf-8')
    return keccak.new(data=data, digest_bits=256).hexdigest()


def contract_identifier(symbol: str) -> str:
    '''
    Contract name derived from a token symbol. Example: `M-TK` -> `MTKToken`
    '''
    return RE_NON_IDENTIFIER.sub('', symbol or '') + 'Token'


def version_str_from_line(line) -> Optional[str]:
    '''
    Version range of a `pragma solidity` line in the form NpmSpec accepts:
    no space after an operator and no leading zeros in version components.
    '''
    line = line.strip()
    if not (line.startswith('pragma') and 'solidity' in line):
        return None
    ver = line.split('solidity', maxsplit=1)[-1].split(';', maxsplit=1)[0].strip()
    ver = re.sub(r'([\^>=<~]+)\s+', r'\1', ver)
    return RE_LEADING_ZEROS.sub('', ver)


def version_str_from_source(source: str) -> Optional[str]:
    # Get version part from `pragma solidity ***;` lines
    versions = [version_str_from_line(line) for line in source.split('\n')
                if line.strip().startswith('pragma') and 'solidity' in line]

    if not versions:
        logging.warning('No pragma directive found in source code')
        return None

    return ' '.join(sorted(set(versions)))


@functools.cache
def get_all_installable_versions() -> List[str]:
    '''
    solc versions available for install, ascending. Fetched once per process.
    '''
    return [str(v) for v in sorted(solcx.get_installable_solc_versions())]


def filter_versions(source: str, versions) -> List[str]:
    '''
    Versions out of `versions` accepted by the pragma of `source`, ascending
    '''
    merged_version = version_str_from_source(source)
    if not merged_version:
        return []

    spec = semantic_version.NpmSpec(merged_version)
    return [str(v) for v in spec.filter(sorted(semantic_version.Version(str(v)) for v in versions))]


def detect_solc_version(source: str, try_install_solc=False) -> Optional[str]:
    '''
    Newest installed solc version matching the source pragma. When
    `try_install_solc` is set and nothing installed matches, fall back to
    the newest installable version.
    '''
    versions = filter_versions(source, solcx.get_installed_solc_versions())
    if versions:
        return versions[-1]
    if try_install_solc:
        versions = filter_versions(source, get_all_installable_versions())
        return versions[-1] if versions else None
    return None
