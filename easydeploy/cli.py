#!/usr/bin/env python3
from __future__ import annotations

import argparse
import json
import sys

import uvicorn
from web3 import Web3

from .common.errors import EasyDeployError, NotConfiguredError
from .common.logging import get_logger
from .common.settings import get_settings
from .ens.namehash import labelhash, namehash
from .ens.workflow import RegistrationRequest, SubnameRegistrationWorkflow


def cmd_serve(args: argparse.Namespace) -> None:
    settings = get_settings()
    uvicorn.run(
        "easydeploy.api.app:create_app",
        factory=True,
        host=args.host or settings.host,
        port=args.port or settings.port,
        reload=args.reload,
    )


def cmd_namehash(args: argparse.Namespace) -> None:
    name = args.name.strip().lower()
    out = {"name": name, "node": Web3.to_hex(namehash(name))}
    if "." in name:
        out["labelhash"] = Web3.to_hex(labelhash(name.split(".", 1)[0]))
    print(json.dumps(out, indent=2))


def cmd_register_subname(args: argparse.Namespace) -> None:
    settings = get_settings()
    ens_config = settings.ens_config()
    if ens_config is None:
        raise NotConfiguredError("Set SEPOLIA_RPC_URL and ENS_OWNER_PRIVATE_KEY to register subnames")
    metrics = get_logger(settings, job="cli")
    workflow = SubnameRegistrationWorkflow(ens_config, metrics=metrics)
    try:
        result = workflow.register(RegistrationRequest(
            label=args.label,
            owner_address=args.owner,
            token_address=args.token,
            parent_name=args.parent,
        ))
    finally:
        workflow.signer_queue.shutdown()
    print(json.dumps(result.to_dict(), indent=2))


def main() -> None:
    p = argparse.ArgumentParser(description="EasyDeploy AI backend CLI")
    sub = p.add_subparsers()

    sp = sub.add_parser("serve", help="Run the HTTP API")
    sp.add_argument("--host", default=None)
    sp.add_argument("--port", type=int, default=None)
    sp.add_argument("--reload", action="store_true")
    sp.set_defaults(func=cmd_serve)

    sp2 = sub.add_parser("namehash", help="Print the ENS node for a name")
    sp2.add_argument("name")
    sp2.set_defaults(func=cmd_namehash)

    sp3 = sub.add_parser("register-subname", help="Create <label>.<parent> pointing at a token")
    sp3.add_argument("--label", required=True)
    sp3.add_argument("--owner", required=True, help="Address that receives the subname")
    sp3.add_argument("--token", required=True, help="Token contract address for the addr record")
    sp3.add_argument("--parent", default=None, help="Parent name (defaults to ENS_PARENT_NAME)")
    sp3.set_defaults(func=cmd_register_subname)

    args = p.parse_args()
    if not hasattr(args, "func"):
        p.print_help()
        return
    try:
        args.func(args)
    except EasyDeployError as e:
        print(f"error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
