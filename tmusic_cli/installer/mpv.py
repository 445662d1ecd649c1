"""
Detects and installs the MPV media player through the platform's package manager.
"""

import asyncio
import logging
import platform
import shutil
import sys

from rich.console import Console

from tmusic_cli.api.client import check_connectivity
from tmusic_cli.exceptions import InstallationError

log = logging.getLogger(__name__)

# Package manager name -> executable looked up on PATH
PACKAGE_MANAGERS = {
    "brew": "brew",
    "apt": "apt-get",
    "dnf": "dnf",
    "yum": "yum",
    "pacman": "pacman",
    "choco": "choco",
    "scoop": "scoop",
    "winget": "winget",
}

LINUX_COMMANDS = {
    "apt": "sudo apt-get update && sudo apt-get install -y mpv",
    "dnf": "sudo dnf install -y mpv",
    "yum": "sudo yum install -y mpv",
    "pacman": "sudo pacman -S --noconfirm mpv",
}
MACOS_COMMANDS = {"brew": "brew install mpv"}
WINDOWS_COMMANDS = {
    "choco": "choco install mpv -y",
    "scoop": "scoop install mpv",
    "winget": "winget install --id=mpv-player.mpv -e",
}

MIN_PYTHON = (3, 10)


class MpvInstaller:
    """Checks for MPV and installs it when a supported package manager is present."""

    def __init__(
        self,
        console: Console | None = None,
        mpv_path: str = "mpv",
        system: str | None = None,
        machine: str | None = None,
    ):
        self.console = console or Console()
        self.mpv_path = mpv_path
        self.system = system or platform.system()
        self.machine = machine or platform.machine()

    @property
    def is_windows(self) -> bool:
        return self.system == "Windows"

    @property
    def is_macos(self) -> bool:
        return self.system == "Darwin"

    def _platform_commands(self) -> dict[str, str]:
        if self.is_windows:
            return WINDOWS_COMMANDS
        if self.is_macos:
            return MACOS_COMMANDS
        return LINUX_COMMANDS

    def is_installed(self) -> bool:
        return shutil.which(self.mpv_path) is not None

    def detect_package_manager(self) -> str | None:
        """Returns the first supported package manager available on PATH."""
        supported = self._platform_commands()
        for name, executable in PACKAGE_MANAGERS.items():
            if name in supported and shutil.which(executable):
                return name
        return None

    def install_command(self, package_manager: str) -> list[str]:
        """
        Builds the argv that installs MPV with the given package manager.

        Raises:
            InstallationError: If the package manager is not supported here.
        """
        command = self._platform_commands().get(package_manager)
        if not command:
            hint = " Please install Homebrew first." if self.is_macos else ""
            raise InstallationError(
                f"Unsupported package manager: {package_manager}.{hint}"
            )
        if self.is_windows:
            return ["cmd", "/c", command]
        return ["sh", "-c", command]

    async def get_version(self) -> str | None:
        """First line of `mpv --version`, or None if it cannot be run."""
        try:
            process = await asyncio.create_subprocess_exec(
                self.mpv_path,
                "--version",
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.DEVNULL,
            )
            stdout, _ = await process.communicate()
        except OSError as e:
            log.debug(f"MPV version check failed: {e}")
            return None
        lines = stdout.decode("utf-8", errors="replace").splitlines()
        return lines[0] if lines else None

    async def _run_install(self, argv: list[str]) -> None:
        self.console.print(f"[dim]Command: {argv[-1]}[/dim]")
        try:
            process = await asyncio.create_subprocess_exec(*argv)
        except OSError as e:
            raise InstallationError(f"Could not start installer: {e}") from e
        code = await process.wait()
        if code != 0:
            raise InstallationError(f"Installation failed with code {code}")

    async def _print_version(self, failure_note: str) -> None:
        version = await self.get_version()
        self.console.print(f"[dim]{version or failure_note}[/dim]")

    async def install(self) -> bool:
        """
        Ensures MPV is installed. Never raises; failures print manual instructions.

        Returns:
            True if MPV is available afterwards.
        """
        try:
            with self.console.status("Checking MPV installation..."):
                installed = self.is_installed()
                package_manager = None if installed else self.detect_package_manager()

            if installed:
                self.console.print("[green]✓ MPV is already installed![/green]")
                await self._print_version(
                    "MPV version check failed, but MPV is available."
                )
                return True

            if not package_manager:
                self.console.print("[red]✗ No supported package manager found![/red]")
                self.print_manual_instructions()
                return False

            self.console.print(
                f"[yellow]✓ Found package manager: {package_manager}[/yellow]"
            )
            self.console.print("\n[bold blue]🎵 Installing MPV Media Player...[/bold blue]")
            self.console.print(
                "[dim]MPV is required for audio playback in the terminal music player."
                "[/dim]"
            )
            await self._run_install(self.install_command(package_manager))

            with self.console.status("Verifying MPV installation..."):
                installed = self.is_installed()

            if not installed:
                self.console.print("[red]✗ MPV installation verification failed![/red]")
                self.print_manual_instructions()
                return False

            self.console.print("[green]✓ MPV installed successfully![/green]")
            await self._print_version("MPV installed but version check failed.")
            self.console.print(
                "\n[bold green]✅ Setup complete! You can now use the terminal music"
                " player.[/bold green]"
            )
            return True

        except InstallationError as e:
            self.console.print("[red]✗ Installation failed![/red]")
            self.console.print(f"[red]Error:[/red] {e}")
            self.print_manual_instructions()
            return False

    def print_manual_instructions(self) -> None:
        self.console.print("\n[bold yellow]📋 Manual Installation Required[/bold yellow]")
        self.console.print(
            "Please install MPV manually using the appropriate method for your"
            " system:\n"
        )
        if self.is_windows:
            self.console.print("[cyan]Windows:[/cyan]")
            self.console.print("• Chocolatey: [dim]choco install mpv[/dim]")
            self.console.print("• Scoop: [dim]scoop install mpv[/dim]")
            self.console.print("• Winget: [dim]winget install mpv-player.mpv[/dim]")
            self.console.print(
                "• Manual: [dim]Download from https://mpv.io/installation/[/dim]"
            )
        elif self.is_macos:
            self.console.print("[cyan]macOS:[/cyan]")
            self.console.print("• Homebrew: [dim]brew install mpv[/dim]")
            self.console.print("• MacPorts: [dim]sudo port install mpv[/dim]")
        else:
            self.console.print("[cyan]Linux:[/cyan]")
            self.console.print("• Ubuntu/Debian: [dim]sudo apt-get install mpv[/dim]")
            self.console.print("• Fedora/RHEL: [dim]sudo dnf install mpv[/dim]")
            self.console.print("• Arch Linux: [dim]sudo pacman -S mpv[/dim]")
        self.console.print(
            "\n[dim]After installation, run the music player again with:[/dim] tmusic"
        )

    async def check_system_requirements(self) -> bool:
        """Prints Python, platform and connectivity checks. True if Python is new enough."""
        self.console.print("[bold blue]🔍 Checking system requirements...[/bold blue]\n")

        version = platform.python_version()
        python_ok = sys.version_info[:2] >= MIN_PYTHON
        if python_ok:
            self.console.print(f"[green]✓ Python version:[/green] {version}")
        else:
            required = ".".join(map(str, MIN_PYTHON))
            self.console.print(f"[red]✗ Python version:[/red] {version}")
            self.console.print(f"[red]   Required: >= {required}[/red]")

        self.console.print(f"[green]✓ Platform:[/green] {self.system} ({self.machine})")

        connected, _ = await check_connectivity()
        if connected:
            self.console.print("[green]✓ Internet connection: Available[/green]")
        else:
            self.console.print("[yellow]⚠️  Internet connection: Could not verify[/yellow]")

        self.console.print()
        return python_ok
