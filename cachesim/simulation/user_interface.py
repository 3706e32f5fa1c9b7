"""Interactive text menu for the cache simulator.

The menu reads one answer per line from `stdin` and writes everything to
`stdout`; both can be swapped for StringIO objects in tests. Reaching EOF
on input behaves like choosing "Exit".
"""
import os
import sys
from typing import Optional, TextIO

from cachesim.core.errors import InvalidAddress, LoadFailure
from cachesim.core.simulator import CacheSystem
from cachesim.data.stats_export import Exporter, export_chart_json, export_chart_pdf
from cachesim.simulation._ui_helpers import format_cache, format_memory, format_stats, format_trace
from cachesim.simulation.simulation import Simulation

MENU = [
    "1. Load RAM data from file",
    "2. Display RAM contents",
    "3. Display cache contents",
    "4. Read from address (manual)",
    "5. Write to address (manual)",
    "6. Simulate sequential access",
    "7. Simulate random access",
    "8. Simulate local access",
    "9. Show cache statistics",
    "10. Export cache statistics",
    "0. Exit",
]


class EndOfInput(Exception):
    pass


class UserInterface:
    def __init__(self, system: CacheSystem, stdin: TextIO = None, stdout: TextIO = None,
                 seed: Optional[int] = None):
        self.system = system
        self.stdin = stdin or sys.stdin
        self.stdout = stdout or sys.stdout
        self.simulation = Simulation(system, seed=seed)
        # debug traces from manual reads/writes are printed as they happen;
        # a listener the caller already attached still gets every trace
        self._previous_listener = system.on_trace
        self.system.on_trace = self._show_trace

    def say(self, text: str = ""):
        self.stdout.write(text + "\n")

    def ask(self, prompt: str) -> str:
        self.stdout.write(prompt)
        self.stdout.flush()
        line = self.stdin.readline()
        if not line:
            raise EndOfInput()
        return line.strip()

    def ask_int(self, prompt: str) -> int:
        return int(self.ask(prompt))

    def _show_trace(self, trace):
        for line in format_trace(trace):
            self.say(line)
        if self._previous_listener is not None:
            self._previous_listener(trace)

    def run(self):
        while True:
            self.say("\nMenu:")
            for entry in MENU:
                self.say(entry)
            try:
                raw = self.ask("Enter your choice: ")
            except EndOfInput:
                self.say("\nExiting...")
                return
            try:
                choice = int(raw)
            except ValueError:
                self.say("Invalid option!")
                continue
            if choice == 0:
                self.say("\nExiting...")
                return
            try:
                self.dispatch(choice)
            except EndOfInput:
                self.say("\nExiting...")
                return
            except ValueError as exc:
                self.say(f"Invalid input: {exc}")

    def dispatch(self, choice: int):
        handlers = {
            1: self.load_file,
            2: self.display_ram,
            3: self.display_cache,
            4: self.manual_read,
            5: self.manual_write,
            6: self.sequential_access,
            7: self.random_access,
            8: self.local_access,
            9: self.show_statistics,
            10: self.export_statistics,
        }
        handler = handlers.get(choice)
        if handler is None:
            self.say("Invalid option!")
            return
        handler()

    def load_file(self):
        filename = self.ask("Enter filename: ")
        try:
            loaded = self.system.load_bulk_file(filename)
        except LoadFailure as exc:
            self.say(f"Error loading file! {exc}")
            loaded = exc.loaded
        self.say(f"{loaded} numbers loaded into RAM.")

    def display_ram(self):
        self.say("\nRAM contents:")
        for row in format_memory(self.system.dump_memory(), self.system.config.block_size):
            self.say(row)

    def display_cache(self):
        self.say("\nCache contents:")
        for line in format_cache(self.system.dump_cache()):
            self.say(line)

    def manual_read(self):
        last = self.system.config.ram_size - 1
        addr = self.ask_int(f"\nEnter address to read (0 - {last}): ")
        try:
            value = self.system.read(addr, debug=True)
        except InvalidAddress:
            self.say("Invalid address!")
            return
        self.say(f"Value at address {addr}: {value}")

    def manual_write(self):
        last = self.system.config.ram_size - 1
        addr = self.ask_int(f"\nEnter address to write (0 - {last}): ")
        value = self.ask_int("Enter value: ")
        try:
            self.system.write(addr, value, debug=True)
        except InvalidAddress:
            self.say("Invalid address!")
            return
        self.say(f"Value {value} written at address {addr}")

    def sequential_access(self):
        requests = self.ask_int("Enter number of requests: ")
        start = self.ask_int(f"Enter start address(0-{self.system.config.ram_size - 1}): ")
        self.say("\nSimulating sequential access...")
        self.simulation.run_scenario('Sequential', start=start, count=requests)
        self.say("Sequential access simulation complete")

    def random_access(self):
        n = self.ask_int("\nEnter the number of random accesses: ")
        self.say("Simulating random access...")
        self.simulation.run_scenario('Random Access', count=n)
        self.say("Random access simulation complete")

    def local_access(self):
        requests = self.ask_int("Enter number of requests per region: ")
        locality_range = self.ask_int("Enter locality range: ")
        regions = self.ask_int("Enter number of local regions: ")
        self.say("\nSimulating multiple local access regions...")

        def announce(region, start):
            self.say(f"Accessing region {region + 1} starting at address {start}")

        self.simulation.run_scenario('Local Access', requests=requests, locality_range=locality_range,
                                     regions=regions, on_region=announce)
        self.say("Local access simulation complete")

    def show_statistics(self):
        self.say("\nCache statistics:")
        for line in format_stats(self.system.stats()):
            self.say(line)

    def export_statistics(self):
        base = self.ask("Enter output path without extension: ")
        stats = self.system.stats()
        history = self.system.stats_counter.hit_rate_history
        saved = []
        try:
            Exporter.export_stats_csv(base + '.csv', stats)
            saved.append(base + '.csv')
        except OSError as exc:
            self.say(f"Could not write {base}.csv: {exc}")
        for path in (export_chart_json(history, stats, base + '.json'),
                     export_chart_pdf(history, base + '.pdf')):
            if path:
                saved.append(path)
        self.say("Saved: " + ", ".join(os.path.basename(p) for p in saved))


def run_ui(system: Optional[CacheSystem] = None, seed: Optional[int] = None):
    UserInterface(system or CacheSystem(), seed=seed).run()


__all__ = ["UserInterface", "run_ui", "MENU"]
