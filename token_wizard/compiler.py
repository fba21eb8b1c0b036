import logging
from typing import Callable, Dict, List, Optional

import addict
import solcx
from solcx.exceptions import (DownloadError, SolcError, SolcInstallationError, SolcNotInstalled,
                              UnsupportedVersionError)

from . import consts
from .fields import CompiledContract
from .imports import ImportResolver, import_paths
from .shared import TokenWizardError, detect_solc_version


class CompilationError(TokenWizardError):
    def __init__(self, message: str, errors: Optional[List[str]] = None) -> None:
        super().__init__(message)
        self.errors = errors or []


def collect_sources(source: str, resolve_import: Callable[[str], Optional[str]],
                    entry: str = consts.ENTRY_SOURCE_UNIT) -> Dict[str, str]:
    '''
    All source units reachable from `source` through its imports, keyed by
    unit name. Raises `CompilationError` for an import that cannot be resolved.
    '''
    sources = {entry: source}
    pending = [entry]
    while pending:
        unit = pending.pop()
        for path in import_paths(sources[unit], importer=unit):
            if path in sources:
                continue
            content = resolve_import(path)
            if content is None:
                raise CompilationError(f'File not found: {path}', [f'File not found: {path}'])
            sources[path] = content
            pending.append(path)
    return sources


def build_input_json(sources: Dict[str, str], settings: Optional[dict] = None) -> addict.Dict:
    input_json = addict.Dict()
    input_json.language = 'Solidity'
    for unit, content in sources.items():
        input_json.sources[unit].content = content
    input_json.settings = addict.Dict(settings or consts.SOLC_SETTINGS)
    return input_json


def select_version(source: str, version: Optional[str], try_install_solc: bool) -> str:
    version = version or detect_solc_version(source, try_install_solc=try_install_solc)
    if not version:
        raise CompilationError(f'No solc version available for pragma in source, '
                               f'install one (for example {consts.DEFAULT_SOLC_VERSION}) or pass `version`')
    if version in [str(v) for v in solcx.get_installed_solc_versions()]:
        return version
    if not try_install_solc:
        raise CompilationError(f'solc {version} is not installed, install it or set `try_install_solc`')

    logging.info(f'Installing solc {version}')
    try:
        solcx.install_solc(version)
    except (SolcInstallationError, UnsupportedVersionError, DownloadError, OSError) as e:
        raise CompilationError(f'Cannot install solc {version}: {e}')
    return version


def error_messages(errors: List[dict], severity: str) -> List[str]:
    return [e.get('formattedMessage') or e.get('message', '')
            for e in errors if e.get('severity') == severity]


def pick_contract(contracts: addict.Dict, contract_name: Optional[str]):
    names = list(contracts.keys())
    if contract_name and contract_name in contracts:
        return contract_name
    if contract_name:
        logging.warning(f'Contract {contract_name} not in compilation output, found {names}')
    return next((n for n in names if n.endswith('Token')), names[0] if names else None)


def compile_contract(source: str, contract_name: Optional[str] = None,
                     resolve_import: Optional[Callable[[str], Optional[str]]] = None,
                     version: Optional[str] = None, try_install_solc=False,
                     settings: Optional[dict] = None) -> CompiledContract:
    '''
    Compile a generated token source with solc (through py-solc-x).

    Parameters:
        source: solidity source of the entry unit
        contract_name: contract to return, default is the first `*Token` contract
        resolve_import: returns the content of an imported file or None, default is `ImportResolver()`
        version: solc version. Example: 0.8.20. Default is detected from the pragma
        try_install_solc: install the solc version when it is missing
    '''
    resolve_import = resolve_import or ImportResolver()
    sources = collect_sources(source, resolve_import)
    input_json = build_input_json(sources, settings)
    version = select_version(source, version, try_install_solc)
    logging.info(f'Compiling {len(sources)} source units with solc {version}')

    try:
        raw_output = solcx.compile_standard(input_json.to_dict(), solc_version=version)
    except SolcError as e:
        messages = error_messages(getattr(e, 'error_dict', None) or [], 'error') or [str(e)]
        raise CompilationError('Compilation failed: ' + '\n'.join(messages), messages)
    except SolcNotInstalled as e:
        raise CompilationError(str(e))

    output = addict.Dict(raw_output)
    errors = error_messages(output.errors or [], 'error')
    if errors:
        raise CompilationError('Compilation failed: ' + '\n'.join(errors), errors)
    warnings = error_messages(output.errors or [], 'warning')
    for w in warnings:
        logging.warning(w)

    contracts = output.contracts[consts.ENTRY_SOURCE_UNIT]
    name = pick_contract(contracts, contract_name)
    if not name:
        raise CompilationError('No contract found in compilation output')

    target = contracts[name]
    return CompiledContract(
        contract_name=name,
        abi=raw_output['contracts'][consts.ENTRY_SOURCE_UNIT][name]['abi'],
        bytecode='0x' + target.evm.bytecode.object,
        deployed_bytecode='0x' + target.evm.deployedBytecode.object,
        solc_version=version,
        warnings=warnings,
    )
