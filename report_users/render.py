"""Write report rows as JSON or as a plain text table."""

import json

USER_HEADER = ["Organization", "Space", "Username", "Role"]
BUILDPACK_HEADER = ["Organization", "Space", "Application", "Buildpacks", "Messages"]


def render_json(rows: list, out):
    json.dump([row.to_json() for row in rows], out, indent=2)
    out.write("\n")


def _cell(value) -> str:
    if isinstance(value, (list, tuple)):
        return ", ".join(value)
    return str(value)


def render_table(header: list, rows: list, out):
    cells = [[_cell(value) for value in row] for row in rows]
    widths = [len(h) for h in header]
    for line in cells:
        for idx, value in enumerate(line):
            widths[idx] = max(widths[idx], len(value))

    def write_line(values):
        out.write("  ".join(v.ljust(w) for v, w in zip(values, widths)).rstrip() + "\n")

    write_line(header)
    write_line(["-" * w for w in widths])
    for line in cells:
        write_line(line)
