"""Entry point for: python -m signage.player

    signage-player register --name "Lobby" --location "HQ floor 1"
    signage-player run          # wait for approval, then play; type q + Enter to exit
    signage-player status
"""

import argparse
import logging
import sys

from signage.player.config import PlayerSettings
from signage.player.api_client import DisplayApiError
from signage.player.device import NETWORK_ERRORS, DeviceState, DisplayDevice


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="signage-player", description="Digital signage display player")
    parser.add_argument("--server", help="Server URL (default from SIGNAGE_PLAYER_SERVER_URL)")
    parser.add_argument("-v", "--verbose", action="store_true")
    sub = parser.add_subparsers(dest="command", required=True)

    register = sub.add_parser("register", help="Register this display and wait for approval")
    register.add_argument("--name", required=True)
    register.add_argument("--location", required=True)
    register.add_argument("--display-id")
    register.add_argument("--password")
    register.add_argument("--width", type=int)
    register.add_argument("--height", type=int)

    login = sub.add_parser("login", help="Sign in as an existing display with its password")
    login.add_argument("--display-id", required=True)
    login.add_argument("--password", required=True)

    sub.add_parser("run", help="Wait for approval, then play the assigned loop")
    sub.add_parser("status", help="Show registration status")
    sub.add_parser("reset", help="Forget the stored credentials")
    return parser


def _run(device: DisplayDevice) -> int:
    if device.state == DeviceState.UNREGISTERED:
        print("Not registered. Run `signage-player register` first.", file=sys.stderr)
        return 1

    print(f"Display {device.credentials.display_id}: waiting for approval...")
    if device.wait_for_approval() == DeviceState.REJECTED:
        print(f"Registration rejected: {device.rejection_reason or 'no reason given'}")
        print("Type q + Enter to clear credentials and start over.")
        _wait_for_exit_key()
        device.exit()
        return 2

    device.activate()
    if device.state == DeviceState.NO_CONTENT:
        print("No content assigned to this display yet.")
    print("Playing. Type q + Enter to exit.")
    _wait_for_exit_key()
    device.exit()
    return 0


def _describe(error: Exception) -> str:
    if isinstance(error, DisplayApiError):
        return error.detail
    return f"cannot reach server ({error})"


def _wait_for_exit_key() -> None:
    for line in sys.stdin:
        if line.strip().lower() == "q":
            return


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    )

    settings = PlayerSettings()
    if args.server:
        settings.server_url = args.server
    device = DisplayDevice(settings)

    if args.command == "register":
        resolution = {"width": args.width, "height": args.height} if args.width and args.height else None
        try:
            creds = device.register(
                args.name,
                args.location,
                display_id=args.display_id,
                password=args.password,
                resolution=resolution,
                device_info={"client": "signage-player"},
            )
        except NETWORK_ERRORS as e:
            print(f"Registration failed: {_describe(e)}", file=sys.stderr)
            return 1
        print(f"Registered as {creds.display_id}. Ask an admin to approve the request.")
        return 0

    if args.command == "login":
        try:
            creds = device.login(args.display_id, args.password)
        except NETWORK_ERRORS as e:
            print(f"Login failed: {_describe(e)}", file=sys.stderr)
            return 1
        print(f"Signed in as {creds.display_id}.")
        return 0

    if args.command == "status":
        if device.state == DeviceState.UNREGISTERED:
            print("unregistered")
        else:
            print(f"{device.credentials.display_id}: {device.check_approval().value}")
        return 0

    if args.command == "reset":
        device.exit()
        return 0

    return _run(device)


if __name__ == "__main__":
    sys.exit(main())
