from src.domain.ports.toolchain_port import ToolchainPort
from src.domain.value_objects.build_status import ToolchainCapability
from src.infrastructure.toolchains.cargo_toolchain import CargoToolchain
from src.infrastructure.toolchains.command_toolchain import CommandToolchain
from src.infrastructure.toolchains.gradle_toolchain import GradleToolchain


def create_toolchains() -> dict[str, ToolchainPort]:
    """Return the built-in toolchain adapters by name.

    ``command`` and ``package-command`` run arbitrary argv, with compile and
    package capability respectively.
    """
    toolchains: list[ToolchainPort] = [
        CargoToolchain(),
        GradleToolchain(),
        CommandToolchain(),
        CommandToolchain("package-command", ToolchainCapability.PACKAGE),
    ]
    return {t.name: t for t in toolchains}


__all__ = [
    "CargoToolchain",
    "CommandToolchain",
    "GradleToolchain",
    "create_toolchains",
]
