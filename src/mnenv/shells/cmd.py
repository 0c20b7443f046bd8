"""``cmd.exe`` batch shims."""

from __future__ import annotations

from pathlib import Path

from mnenv.shells.base import render

TAB_TOKEN = "@TAB@"

# Loops use labels outside parenthesized blocks; cmd.exe cannot jump into a block.
SHIM_TEMPLATE = r"""@echo off
rem mnenv shim for @EXECUTABLE@
setlocal EnableExtensions DisableDelayedExpansion

if defined MNENV_ROOT (set "ROOT=%MNENV_ROOT%") else (set "ROOT=%USERPROFILE%\.mnenv")

set "VERSION=%MNENV_VERSION%"
set "SOURCE=%MNENV_SOURCE%"

if defined VERSION goto version_done
set "DIR=%CD%"
:version_walk
call :read_marker "%DIR%\.metanorma-version"
if defined MARKER_VALUE set "VERSION=%MARKER_VALUE%"
if defined VERSION goto version_done
for %%I in ("%DIR%\..") do set "PARENT=%%~fI"
if /i "%PARENT%"=="%DIR%" goto version_global
set "DIR=%PARENT%"
goto version_walk
:version_global
call :read_marker "%ROOT%\version"
if defined MARKER_VALUE set "VERSION=%MARKER_VALUE%"
:version_done

if defined SOURCE goto source_done
set "DIR=%CD%"
:source_walk
call :read_marker "%DIR%\.metanorma-source"
if defined MARKER_VALUE set "SOURCE=%MARKER_VALUE%"
if defined SOURCE goto source_done
for %%I in ("%DIR%\..") do set "PARENT=%%~fI"
if /i "%PARENT%"=="%DIR%" goto source_global
set "DIR=%PARENT%"
goto source_walk
:source_global
call :read_marker "%ROOT%\source"
if defined MARKER_VALUE set "SOURCE=%MARKER_VALUE%"
:source_done
if not defined SOURCE set "SOURCE=gemfile"

if not defined VERSION (
  echo mnenv: version not set 1>&2
  echo Set a version with: mnenv global ^<version^> or mnenv local ^<version^> 1>&2
  exit /b 1
)

if "%SOURCE%"=="binary" (
  set "EXECUTABLE=%ROOT%\versions\%VERSION%\metanorma.exe"
) else (
  set "EXECUTABLE=%ROOT%\versions\%VERSION%\bin\@EXECUTABLE@.cmd"
)

if not exist "%EXECUTABLE%" (
  echo mnenv: @EXECUTABLE@ not installed for version %VERSION% ^(source: %SOURCE%^) 1>&2
  echo Install it with: mnenv install %VERSION% --source %SOURCE% 1>&2
  exit /b 1
)

call "%EXECUTABLE%" %*
exit /b %ERRORLEVEL%

rem First line of %1 with leading and trailing blanks removed; unset when blank.
:read_marker
set "MARKER_VALUE="
if not exist "%~1" exit /b 0
set /p MARKER_VALUE=<"%~1"
if not defined MARKER_VALUE exit /b 0
for /f "tokens=*" %%V in ("%MARKER_VALUE%") do set "MARKER_VALUE=%%V"
:trim_tail
if not defined MARKER_VALUE exit /b 0
if "%MARKER_VALUE:~-1%"==" " (set "MARKER_VALUE=%MARKER_VALUE:~0,-1%" & goto trim_tail)
if "%MARKER_VALUE:~-1%"=="@TAB@" (set "MARKER_VALUE=%MARKER_VALUE:~0,-1%" & goto trim_tail)
exit /b 0
"""


class CmdShell:
    name = "cmd"
    shim_extension = ".bat"
    is_windows_family = True

    def __repr__(self) -> str:
        return "CmdShell()"

    def shim_body(self, executable: str) -> str:
        return render(SHIM_TEMPLATE, executable).replace(TAB_TOKEN, "\t").replace("\n", "\r\n")

    def describe_activation(self, version: str, source: str | None = None) -> str:
        lines = [f"set MNENV_VERSION={version}"]
        if source:
            lines.append(f"set MNENV_SOURCE={source}")
        lines.append("rem Run this in your CMD session")
        return "\n".join(lines)

    def config_file_path(self, home: Path) -> Path | None:
        # cmd.exe has no profile script
        return None

    def path_setup(self, shims_dir: Path) -> str:
        return f'setx PATH "{shims_dir};%PATH%"'
