"""
Help renderer tests (layout, sections, alignment, styling).

Conventions
- Test method names follow CamelCase per project convention.
"""

import unittest
from unittest import TestCase

from argus import cli
from argus.helper import render


class TestRender(TestCase):
    def setUp(self):
        self.program = cli("app", "Build tool")
        self.build = self.program.command("build", "Build the project", aliases=("b",))
        self.build \
            .argument("<target>", "Build target") \
            .option("--prod", "Production build", default=False) \
            .option("--config <file>", "Config file") \
            .option("--jobs", "Parallel jobs", type="number", default=4)
        self.build.command("watch", "Rebuild on change", aliases=("w",))

    def testFullLayout(self):
        expected = "\n".join([
            "app build",
            "Build the project",
            "",
            "Usage: app build <command> <target> [--prod] [--config <file>] [--jobs <value>]",
            "",
            "Commands:",
            "  watch, w  Rebuild on change",
            "",
            "Arguments:",
            "  <target>  Build target",
            "",
            "Options:",
            "  --prod           Production build (default: false)",
            "  --config <file>  Config file",
            "  --jobs <value>   Parallel jobs (default: 4)",
            "  --help           Show help",
        ])
        self.assertEqual(render(self.build.compile()).plain, expected)

    def testRootListsCommandsWithAliases(self):
        plain = render(self.program.compile()).plain
        self.assertIn("Usage: app <command>", plain)
        self.assertIn("  build, b  Build the project", plain)
        self.assertNotIn("Arguments:", plain)

    def testEmptySectionsAreOmitted(self):
        plain = render(self.build.compile().children["watch"]).plain
        self.assertNotIn("Commands:", plain)
        self.assertNotIn("Arguments:", plain)
        self.assertIn("Options:\n  --help  Show help", plain)

    def testMissingDescriptionsLeaveNoPadding(self):
        command = cli("tool").argument("<name>").option("--quiet").compile()
        plain = render(command).plain
        self.assertTrue(plain.startswith("tool\n\nUsage: tool <name> [--quiet]"))
        self.assertIn("\n  <name>\n", plain)
        self.assertIn("\n  --quiet\n", plain)

    def testDeclaredTrueDefault(self):
        command = cli("tool").option("--color", "Colorize", default=True).compile()
        self.assertIn("--color  Colorize (default: true)", render(command).plain)

    def testColorfulKeepsPlainLayout(self):
        command = self.build.compile()
        plain = render(command).plain
        styled = render(command, colorful=True)
        self.assertEqual(styled.plain, plain)
        self.assertTrue(styled.spans)
        self.assertFalse(render(command).spans)


if __name__ == "__main__":
    unittest.main()
