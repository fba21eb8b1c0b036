#!/usr/bin/env python3
import argparse
import json
import logging
import os
import sys

from . import consts
from .compiler import compile_contract
from .flatten import flatten
from .generator import generate_contract_code
from .imports import ImportResolver, to_simple_name
from .shared import TokenWizardError
from .validation import validate_config


def load_config(path: str):
    with open(path, 'r') as f:
        return validate_config(json.load(f))


def write_output(content: str, output):
    if output:
        with open(output, 'w') as f:
            f.write(content)
    else:
        sys.stdout.write(content)


def make_resolver(args) -> ImportResolver:
    package_paths = None
    if args.openzeppelin:
        package_paths = {consts.OPENZEPPELIN_PREFIX: args.openzeppelin}
    include_paths = [p[:-1] if p.endswith('/') else p for p in args.include or []]
    return ImportResolver(package_paths=package_paths, include_paths=include_paths)


def cmd_generate(args):
    generated = generate_contract_code(load_config(args.config))
    source = generated.source
    if args.flatten:
        source = flatten(source, make_resolver(args))
    write_output(source, args.output)
    logging.info(f'Generated {generated.contract_name} ({generated.source_hash})')


def cmd_flatten(args):
    path = args.path
    if not os.path.isfile(path):
        raise TokenWizardError(f'Target is not file {path}')

    with open(path, 'r') as f:
        source = f.read()
    content = flatten(source, make_resolver(args))

    filename = to_simple_name(path)
    ext = filename.split('.')[-1]
    output = args.output or (filename[:-len(ext)-1] + '_flattened.' + ext)
    write_output(content, output)


def cmd_compile(args):
    generated = generate_contract_code(load_config(args.config))
    compiled = compile_contract(generated.source, generated.contract_name,
                                resolve_import=make_resolver(args),
                                version=args.solc_version,
                                try_install_solc=args.install_solc)
    artifact = {
        'contractName': compiled.contract_name,
        'abi': compiled.abi,
        'bytecode': compiled.bytecode,
        'deployedBytecode': compiled.deployed_bytecode,
        'solcVersion': compiled.solc_version,
        'sourceCode': generated.source,
        'sourceHash': generated.source_hash,
    }
    write_output(json.dumps(artifact, indent=2), args.output)


def main(argv=None):
    parser = argparse.ArgumentParser(description='Generate, flatten and compile ERC-20 token contracts.')
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging')
    parser.add_argument('--openzeppelin', type=str, help='Directory of the @openzeppelin/contracts package', required=False)
    parser.add_argument('--include', action='append', help='Paths searched for imported files', required=False)
    subparsers = parser.add_subparsers(dest='command', help='Subcommands')

    generate_parser = subparsers.add_parser('generate', aliases=['gen'], help='Generate token source from a json config')
    generate_parser.add_argument('config', type=str, help='Json file with the token configuration')
    generate_parser.add_argument('--flatten', action='store_true', help='Inline all imports')
    generate_parser.add_argument('--output', type=str, help='The output path to write file', required=False)

    flatten_parser = subparsers.add_parser('flatten', help='Flatten a solidity file')
    flatten_parser.add_argument('--path', type=str, help='The main contract to be flattened', required=True)
    flatten_parser.add_argument('--output', type=str, help='The output path to write file', required=False)

    compile_parser = subparsers.add_parser('compile', help='Generate and compile a token, print abi and bytecode as json')
    compile_parser.add_argument('config', type=str, help='Json file with the token configuration')
    compile_parser.add_argument('--solc-version', type=str, help='solc version, default is detected from the pragma', required=False)
    compile_parser.add_argument('--install-solc', action='store_true', help='Install solc when missing')
    compile_parser.add_argument('--output', type=str, help='The output path to write file', required=False)

    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format='%(levelname)s %(message)s')

    commands = {'generate': cmd_generate, 'gen': cmd_generate,
                'flatten': cmd_flatten, 'compile': cmd_compile}
    if args.command not in commands:
        parser.print_help()
        return 1

    try:
        commands[args.command](args)
    except (TokenWizardError, OSError) as e:
        logging.error(str(e))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
