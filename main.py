import time

from argus import *

program = cli("pkg", "A tiny package manager", colorful=True)


async def timing(context, next):
    started = time.monotonic()
    await next()
    context.ui.box(f"done in {time.monotonic() - started:.3f}s")


program.use(timing)

program.command("install", "Install a package", aliases=("i", "add")) \
    .argument("<package>", "Package to install") \
    .option("--dev", "Save as a dev dependency") \
    .option("--registry <url>", "Registry to install from", default="https://registry.example.org") \
    .action(lambda context: context.ui.table([{**context.args, **context.options}]))

program.command("list", "List installed packages", aliases=("ls",)) \
    .option("--depth", "Dependency depth", type="number", default=0) \
    .action(lambda context: context.ui.table([
        {"package": "left-pad", "version": "1.3.0", "depth": context.options["depth"]},
    ]))


if __name__ == '__main__':
    raise SystemExit(invoke(program))
