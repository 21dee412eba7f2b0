"""CLI entry point for the switch panel.

Examples:
  # Live front panel of the first device, refreshed every 3 seconds
  switchpanel --url https://panel.local --username admin --password <PW> watch

  # Ten updates of device 2 with details of one interface
  switchpanel watch --device 2 --count 10 --port Ethernet1/49/1

  # Device management
  switchpanel devices add 192.168.1.10 --name core-sw1 --community public
  switchpanel devices sync 3

  # Section configuration
  switchpanel sections add 3
  switchpanel sections add-combo 3
  switchpanel sections set 3 sec-1700000000000 rows 1
"""

from __future__ import annotations

import argparse
import asyncio
import sys

from loguru import logger

from switchpanel import configure_logging
from switchpanel.client import SwitchPanelClient
from switchpanel.config import PanelSettings
from switchpanel.exceptions import PanelError
from switchpanel.history import TrafficHistoryStore
from switchpanel.layout import build_layout, find_port, usage_summary
from switchpanel.models.device import Device, DeviceDraft
from switchpanel.ranges import format_port_range, section_port_indices
from switchpanel.render import PanelFormatter, PortDetailFormatter
from switchpanel.scheduler import PollScheduler
from switchpanel.sections import DeviceEditor
from switchpanel.state import PanelState

_CLEAR_SCREEN = "\033[2J\033[H"


def _find_device(client: SwitchPanelClient, device_id: int) -> Device:
    for device in client.list_devices():
        if device.id == device_id:
            return device
    raise PanelError(f"No device with id {device_id}")


def render_state(state: PanelState, history: TrafficHistoryStore) -> str:
    """Text for one panel refresh: front panel plus optional port detail."""
    groups = build_layout(state.sections, state.selected_port)
    out = PanelFormatter(groups, state.system, usage_summary(state.sections)).format()
    if state.last_error:
        out += f"\n\n  Last poll failed: {state.last_error}"
    if state.selected_port:
        port = find_port(state.sections, state.selected_port)
        if port is not None:
            out += "\n\n" + PortDetailFormatter(port, history.get(port.if_name)).format()
    return out


async def _watch(client: SwitchPanelClient, settings: PanelSettings, args: argparse.Namespace) -> None:
    session = client.me()
    if not session.may_poll:
        raise PanelError("Password change required before the panel can be shown")

    device_id = args.device
    if device_id is None:
        devices = client.list_devices()
        if not devices:
            raise PanelError("No devices configured. Add one with 'switchpanel devices add'.")
        device_id = devices[0].id

    done = asyncio.Event()
    updates = 0

    def on_update(state: PanelState) -> None:
        nonlocal updates
        updates += 1
        prefix = _CLEAR_SCREEN if args.clear else ""
        print(prefix + render_state(state, scheduler.history), flush=True)
        if args.count and updates >= args.count:
            done.set()

    scheduler = PollScheduler(
        fetch=lambda dev: asyncio.to_thread(client.get_status, dev),
        history=TrafficHistoryStore(settings.history_capacity),
        interval=settings.poll_interval,
        on_update=on_update,
    )
    scheduler.set_always_poll(settings.always_poll)
    scheduler.start(device_id)
    if args.port:
        scheduler.select_port(args.port)
    try:
        await done.wait()
    finally:
        await scheduler.stop()


def cmd_watch(client: SwitchPanelClient, settings: PanelSettings, args: argparse.Namespace) -> None:
    """Poll a device and print its front panel on every update."""
    asyncio.run(_watch(client, settings, args))


def cmd_devices_list(client: SwitchPanelClient, args: argparse.Namespace) -> None:
    devices = client.list_devices()
    if not devices:
        print("No devices configured")
        return
    print(f"{'ID':>4s}  {'Name':20s}  {'Address':16s}  {'Ports':>5s}  {'Sections':>8s}  Enabled")
    print("-" * 72)
    for d in devices:
        print(
            f"{d.id:>4d}  {d.name:20s}  {d.ip_address:16s}  {d.detected_ports:>5d}  "
            f"{len(d.sections):>8d}  {'yes' if d.enabled else 'no'}"
        )


def cmd_devices_add(client: SwitchPanelClient, args: argparse.Namespace) -> None:
    draft = DeviceDraft(
        name=args.name or "",
        ip_address=args.ip_address,
        community=args.community,
        allow_port_zero=args.allow_port_zero,
    )
    device = client.create_device(draft)
    print(f"Device {device.id} ({device.name or device.ip_address}) added")


def cmd_devices_delete(client: SwitchPanelClient, args: argparse.Namespace) -> None:
    client.delete_device(args.device_id)
    print(f"Device {args.device_id} deleted")


def cmd_devices_sync(client: SwitchPanelClient, args: argparse.Namespace) -> None:
    client.sync_device(args.device_id)
    print(f"Device {args.device_id} synced")


def cmd_sections_show(client: SwitchPanelClient, args: argparse.Namespace) -> None:
    device = _find_device(client, args.device_id)
    print(f"{'ID':20s}  {'Title':16s}  {'Type':8s}  {'Layout':10s}  {'Rows':>4s}  {'Combo':5s}  Ports")
    print("-" * 90)
    for s in device.sections:
        ports = format_port_range(section_port_indices(s.port_ranges, device.allow_port_zero)) or "(none)"
        print(
            f"{s.id:20s}  {s.title:16s}  {s.port_type:8s}  {s.layout_mode.value:10s}  "
            f"{s.rows:>4d}  {'yes' if s.is_combo else 'no':5s}  {ports}"
        )
        if ports != s.port_ranges:
            print(f"{'':20s}  configured as '{s.port_ranges}'")


def cmd_sections_edit(client: SwitchPanelClient, args: argparse.Namespace) -> None:
    """Apply one section edit and save the device configuration."""
    editor = DeviceEditor(_find_device(client, args.device_id))

    if args.sections_command == "add":
        editor.add_section()
    elif args.sections_command == "add-combo":
        editor.add_combo_section()
    elif args.sections_command == "delete":
        editor.delete_section(args.section_id)
    elif args.sections_command == "set":
        editor.update_section(args.section_id, args.field, args.value)

    if not editor.is_dirty:
        print("Nothing to change")
        return
    for problem in editor.problems():
        logger.warning(problem)
    client.update_device(editor.device)
    print(f"Device {args.device_id} configuration saved ({len(editor.sections)} sections)")


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the switch panel."""
    parser = argparse.ArgumentParser(
        prog="switchpanel",
        description="Switch front-panel visualizer — live port status, traffic history and section layout",
    )
    parser.add_argument("--url", help="Backend base URL (env: SWITCHPANEL_URL)")
    parser.add_argument("--username", help="Login user (env: SWITCHPANEL_USERNAME)")
    parser.add_argument("--password", help="Login password (env: SWITCHPANEL_PASSWORD)")
    parser.add_argument("--no-verify-ssl", action="store_true", help="Do not verify SSL certificates")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # watch
    watch = subparsers.add_parser("watch", help="Show the live front panel")
    watch.add_argument("--device", type=int, help="Device ID (default: first device)")
    watch.add_argument("--always-poll", action="store_true", default=None, help="Poll even when not visible")
    watch.add_argument("--interval", type=float, help="Seconds between polls (default: 3)")
    watch.add_argument("--count", type=int, default=0, help="Stop after N updates (default: run until Ctrl-C)")
    watch.add_argument("--port", help="Interface name to show details and history for")
    watch.add_argument("--clear", action="store_true", help="Clear the screen before each update")

    # devices
    devices = subparsers.add_parser("devices", help="Device management")
    devices_sub = devices.add_subparsers(dest="devices_command", help="Device commands")

    devices_sub.add_parser("list", help="List devices")

    devices_add = devices_sub.add_parser("add", help="Add a device")
    devices_add.add_argument("ip_address", help="Device IP address")
    devices_add.add_argument("--name", help="Display name (default: sysName from the device)")
    devices_add.add_argument("--community", default="public", help="SNMP community (default: public)")
    devices_add.add_argument("--allow-port-zero", action="store_true", help="Device numbers ports from 0")

    devices_delete = devices_sub.add_parser("delete", help="Delete a device")
    devices_delete.add_argument("device_id", type=int)

    devices_sync = devices_sub.add_parser("sync", help="Re-detect ports from the device")
    devices_sync.add_argument("device_id", type=int)

    # sections
    sections = subparsers.add_parser("sections", help="Port section configuration")
    sections_sub = sections.add_subparsers(dest="sections_command", help="Section commands")

    for name, help_text in (
        ("show", "Show a device's sections"),
        ("add", "Append a section covering the next free ports"),
        ("add-combo", "Append a combo partner for the last section"),
    ):
        sp = sections_sub.add_parser(name, help=help_text)
        sp.add_argument("device_id", type=int)

    sections_delete = sections_sub.add_parser("delete", help="Delete a section")
    sections_delete.add_argument("device_id", type=int)
    sections_delete.add_argument("section_id")

    sections_set = sections_sub.add_parser("set", help="Change one field of a section")
    sections_set.add_argument("device_id", type=int)
    sections_set.add_argument("section_id")
    sections_set.add_argument(
        "field", choices=["title", "type", "port_type", "layout", "rows", "port_ranges", "is_combo"]
    )
    sections_set.add_argument("value")

    return parser


def main(args: list[str] | None = None) -> None:
    """Main entry point for the switch panel CLI."""
    parser = build_parser()
    parsed = parser.parse_args(args)

    if not parsed.command:
        parser.print_help()
        sys.exit(1)

    configure_logging(level="DEBUG" if parsed.verbose else "INFO")

    try:
        settings = PanelSettings.from_env(
            url=parsed.url,
            username=parsed.username,
            password=parsed.password,
            verify_ssl=False if parsed.no_verify_ssl else None,
            always_poll=getattr(parsed, "always_poll", None),
            poll_interval=getattr(parsed, "interval", None),
        )
        with SwitchPanelClient(
            settings.url,
            username=settings.username,
            password=settings.password,
            verify_ssl=settings.verify_ssl,
            timeout=settings.timeout,
        ) as client:
            if parsed.command == "watch":
                cmd_watch(client, settings, parsed)
            elif parsed.command == "devices":
                if parsed.devices_command == "list":
                    cmd_devices_list(client, parsed)
                elif parsed.devices_command == "add":
                    cmd_devices_add(client, parsed)
                elif parsed.devices_command == "delete":
                    cmd_devices_delete(client, parsed)
                elif parsed.devices_command == "sync":
                    cmd_devices_sync(client, parsed)
                else:
                    print("Usage: switchpanel devices {list|add|delete|sync}")
            elif parsed.command == "sections":
                if parsed.sections_command == "show":
                    cmd_sections_show(client, parsed)
                elif parsed.sections_command in ("add", "add-combo", "delete", "set"):
                    cmd_sections_edit(client, parsed)
                else:
                    print("Usage: switchpanel sections {show|add|add-combo|delete|set}")
    except PanelError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nAborted.", file=sys.stderr)
        sys.exit(130)


if __name__ == "__main__":
    main()
