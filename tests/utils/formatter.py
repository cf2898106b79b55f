# tests/utils/formatter.py
"""In-process stand-in for the external Lua formatter."""


class FakeFormatter:
    """Records every call; returns `output` (or the input) behind `banner`."""

    def __init__(self, output: str | None = None, *, banner: str = "") -> None:
        self.output = output
        self.banner = banner
        self.calls: list[tuple[str, bool, bool]] = []
        self.inputs: list[str] = []

    def _run(self, mode: str, text: str, rename_variables: bool, rename_globals: bool):
        self.calls.append((mode, rename_variables, rename_globals))
        self.inputs.append(text)
        return self.banner + (self.output if self.output is not None else text)

    def minify(self, text: str, *, rename_variables: bool, rename_globals: bool) -> str:
        return self._run("minify", text, rename_variables, rename_globals)

    def beautify(
        self, text: str, *, rename_variables: bool, rename_globals: bool
    ) -> str:
        return self._run("beautify", text, rename_variables, rename_globals)
