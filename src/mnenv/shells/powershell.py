"""PowerShell (Windows PowerShell and pwsh) shims."""

from __future__ import annotations

from pathlib import Path

from mnenv.shells.base import render

SHIM_TEMPLATE = """\
# mnenv shim for @EXECUTABLE@
$ErrorActionPreference = "Stop"

$MnenvRoot = if ($env:MNENV_ROOT) { $env:MNENV_ROOT } else { Join-Path $env:USERPROFILE ".mnenv" }

function Read-MnenvMarker([string]$Path) {
    if (-not (Test-Path -LiteralPath $Path -PathType Leaf)) { return $null }
    $line = Get-Content -LiteralPath $Path -TotalCount 1
    if ($null -eq $line) { return $null }
    $line = "$line".Trim()
    if ($line) { return $line }
    return $null
}

function Find-MnenvMarker([string]$FileName) {
    $dir = (Get-Location).ProviderPath
    while ($dir) {
        $value = Read-MnenvMarker (Join-Path $dir $FileName)
        if ($value) { return $value }
        $parent = Split-Path -Path $dir -Parent
        if (-not $parent -or $parent -eq $dir) { break }
        $dir = $parent
    }
    return $null
}

$Version = $env:MNENV_VERSION
if (-not $Version) { $Version = Find-MnenvMarker ".metanorma-version" }
if (-not $Version) { $Version = Read-MnenvMarker (Join-Path $MnenvRoot "version") }

$Source = $env:MNENV_SOURCE
if (-not $Source) { $Source = Find-MnenvMarker ".metanorma-source" }
if (-not $Source) { $Source = Read-MnenvMarker (Join-Path $MnenvRoot "source") }
if (-not $Source) { $Source = "gemfile" }

if (-not $Version) {
    [Console]::Error.WriteLine("mnenv: version not set")
    [Console]::Error.WriteLine("Set a version with: mnenv global <version> or mnenv local <version>")
    exit 1
}

if ($Source -eq "binary") {
    $Executable = Join-Path $MnenvRoot "versions\\$Version\\metanorma.exe"
} else {
    $Executable = Join-Path $MnenvRoot "versions\\$Version\\bin\\@EXECUTABLE@.cmd"
}

if (-not (Test-Path -LiteralPath $Executable -PathType Leaf)) {
    [Console]::Error.WriteLine("mnenv: @EXECUTABLE@ not installed for version $Version (source: $Source)")
    [Console]::Error.WriteLine("Install it with: mnenv install $Version --source $Source")
    exit 1
}

& $Executable @args
exit $LASTEXITCODE
"""


class PowerShellShell:
    shim_extension = ".ps1"
    is_windows_family = True

    def __init__(self, name: str = "powershell") -> None:
        self.name = name

    def __repr__(self) -> str:
        return f"PowerShellShell(name={self.name!r})"

    def shim_body(self, executable: str) -> str:
        return render(SHIM_TEMPLATE, executable)

    def describe_activation(self, version: str, source: str | None = None) -> str:
        lines = [f"$env:MNENV_VERSION = '{version}'"]
        if source:
            lines.append(f"$env:MNENV_SOURCE = '{source}'")
        lines.append("# Run this in your PowerShell session")
        return "\n".join(lines)

    def config_file_path(self, home: Path) -> Path | None:
        return home / "Documents" / "PowerShell" / "Microsoft.PowerShell_profile.ps1"

    def path_setup(self, shims_dir: Path) -> str:
        return f'$env:PATH = "{shims_dir};" + $env:PATH'
