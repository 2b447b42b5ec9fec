#!/usr/bin/env python3
"""
Read-only host facts for the ``os`` command.

Each query is a single synchronous read of information the interpreter
already exposes.
"""

import os
import getpass
import platform
from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class CpuInfo:
    """Model name and clock speed of one logical CPU."""
    model: str
    speed_mhz: float

    @property
    def speed_ghz(self) -> float:
        return self.speed_mhz / 1000


class SystemInfo:
    """Host information: line ending, CPUs, home directory, user, architecture."""

    def __init__(self, cpuinfo_path: str = '/proc/cpuinfo'):
        self.cpuinfo_path = cpuinfo_path

    def eol(self) -> str:
        return os.linesep

    def homedir(self) -> str:
        return os.path.expanduser('~')

    def username(self) -> str:
        return getpass.getuser()

    def architecture(self) -> str:
        return platform.machine()

    def cpus(self) -> List[CpuInfo]:
        """
        List logical CPUs with model and clock speed.

        Linux exposes both through /proc/cpuinfo. Elsewhere the model comes
        from the platform module and the speed is reported as 0.
        """
        cpus = self._read_proc_cpuinfo()
        if cpus:
            return cpus

        model = platform.processor() or platform.machine() or 'unknown'
        return [CpuInfo(model=model, speed_mhz=0.0) for _ in range(os.cpu_count() or 1)]

    def _read_proc_cpuinfo(self) -> List[CpuInfo]:
        if not os.path.exists(self.cpuinfo_path):
            return []

        cpus = []
        model = None
        speed = 0.0
        with open(self.cpuinfo_path, 'r', encoding='utf-8', errors='replace') as f:
            for line in f:
                key, _, value = line.partition(':')
                key = key.strip()
                value = value.strip()
                if key == 'processor':
                    if model is not None:
                        cpus.append(CpuInfo(model=model, speed_mhz=speed))
                    model = ''
                    speed = 0.0
                elif key == 'model name':
                    model = value
                elif key == 'cpu MHz':
                    try:
                        speed = float(value)
                    except ValueError:
                        speed = 0.0

        if model is not None:
            cpus.append(CpuInfo(model=model, speed_mhz=speed))
        return cpus
