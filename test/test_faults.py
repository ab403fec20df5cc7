"""
Fault tests (codes, formatting, printing, replacement).

Conventions
- Test method names follow CamelCase per project convention.
"""

import copy
import io
import unittest
from unittest import TestCase

from rich.console import Console

from argus.faults import (
    CommandException,
    ConfigurationError,
    FaultCode,
    InvalidSubcommandError,
    MissingArgumentError,
    MissingOptionValueError,
    TableHeaderMismatchError,
    UnknownOptionError,
    isfault,
)


class RecordingUi:
    """Stand-in UI capability that records box() calls."""

    def __init__(self, colors=None):
        self.colors = colors
        self.boxes = []

    def box(self, text, title=None, *, stderr=False):
        self.boxes.append((text, title, stderr))


class BracketColors:
    def bold(self, text):
        return f"<b>{text}</b>"

    def red(self, text):
        return f"<r>{text}</r>"

    def cyan(self, text):
        return f"<c>{text}</c>"


class TestFaultCode(TestCase):
    def testNormalizedLabels(self):
        self.assertEqual(FaultCode.MISSING_ARGUMENT.normalize(), "E_MISSING_ARGUMENT")
        self.assertEqual(FaultCode.UNKNOWN_OPTION.normalize(), "E_UNKNOWN_OPTION")
        self.assertEqual(FaultCode.MISSING_OPTION_VALUE.normalize(), "E_MISSING_OPTION_VALUE")
        self.assertEqual(FaultCode.INVALID_SUBCOMMAND.normalize(), "E_INVALID_SUBCOMMAND")
        self.assertEqual(FaultCode.CONFIGURATION_ERROR.normalize(), "E_CONFIGURATION_ERROR")
        self.assertEqual(FaultCode.TABLE_HEADER_MISMATCH.normalize(), "E_TABLE_HEADER_MISMATCH")

    def testKindsCarryTheirCodes(self):
        kinds = {
            MissingArgumentError: FaultCode.MISSING_ARGUMENT,
            UnknownOptionError: FaultCode.UNKNOWN_OPTION,
            MissingOptionValueError: FaultCode.MISSING_OPTION_VALUE,
            InvalidSubcommandError: FaultCode.INVALID_SUBCOMMAND,
            ConfigurationError: FaultCode.CONFIGURATION_ERROR,
            TableHeaderMismatchError: FaultCode.TABLE_HEADER_MISMATCH,
        }
        for kind, code in kinds.items():
            with self.subTest(kind=kind.__name__):
                self.assertEqual(kind("message").code, code)
                self.assertTrue(issubclass(kind, CommandException))


class TestCommandException(TestCase):
    def setUp(self):
        self.fault = MissingArgumentError(
            "Missing required argument <name>.",
            details="The positional argument <name> is required but was not provided.",
            hint="Provide the <name> value or run with --help to see usage.",
            token="name",
        )

    def testBaseRequiresCode(self):
        with self.assertRaises(TypeError):
            CommandException("no code")

    def testMessageMustBeString(self):
        with self.assertRaises(TypeError):
            MissingArgumentError(None)

    def testCustomStringCode(self):
        fault = CommandException("Custom.", code="TEST_ERROR")
        self.assertEqual(fault.label, "TEST_ERROR")
        self.assertEqual(fault.format(), "TEST_ERROR Custom.")

    def testOptionalPartsDefaultToNone(self):
        fault = UnknownOptionError("Unknown option --x.")
        self.assertIsNone(fault.details)
        self.assertIsNone(fault.hint)
        self.assertEqual(fault.format(), "E_UNKNOWN_OPTION Unknown option --x.")

    def testPlainFormat(self):
        self.assertEqual(self.fault.format(), "\n".join([
            "E_MISSING_ARGUMENT Missing required argument <name>.",
            "The positional argument <name> is required but was not provided.",
            "Hint: Provide the <name> value or run with --help to see usage.",
        ]))

    def testColoredFormat(self):
        text = self.fault.format(RecordingUi(BracketColors()))
        self.assertTrue(text.startswith("<r>E_MISSING_ARGUMENT</r> Missing required argument <name>."))
        self.assertIn("<c>Hint:</c> Provide", text)

    def testOptionsAreReadOnly(self):
        self.assertEqual(self.fault.options["token"], "name")
        with self.assertRaises(TypeError):
            self.fault.options["token"] = "other"

    def testStrIsMessage(self):
        self.assertEqual(str(self.fault), "Missing required argument <name>.")

    def testPrintThroughUi(self):
        ui = RecordingUi()
        self.fault.print(ui)
        (text, title, stderr), = ui.boxes
        self.assertEqual(text, self.fault.format())
        self.assertEqual(title, "Error")
        self.assertTrue(stderr)

    def testPrintThroughColoredUi(self):
        ui = RecordingUi(BracketColors())
        self.fault.print(ui)
        self.assertEqual(ui.boxes[0][1], "<b>Error</b>")

    def testPrintThroughUiWithoutStderrChoice(self):
        class TitledUi:
            colors = None

            def __init__(self):
                self.boxes = []

            def box(self, text, title=None):
                self.boxes.append((text, title))

        ui = TitledUi()
        self.fault.print(ui)
        self.assertEqual(ui.boxes, [(self.fault.format(), "Error")])

    def testPrintWithoutUi(self):
        buffer = io.StringIO()
        self.fault.print(console=Console(file=buffer, width=200, color_system=None))
        self.assertEqual(buffer.getvalue(), "Error:\n" + self.fault.format() + "\n")

    def testReplace(self):
        replaced = copy.replace(self.fault, hint="Try again.", token="other")
        self.assertIsInstance(replaced, MissingArgumentError)
        self.assertEqual(replaced.message, self.fault.message)
        self.assertEqual(replaced.details, self.fault.details)
        self.assertEqual(replaced.hint, "Try again.")
        self.assertEqual(replaced.options["token"], "other")

    def testRichRenderable(self):
        buffer = io.StringIO()
        Console(file=buffer, width=200, color_system=None).print(self.fault)
        self.assertEqual(buffer.getvalue().rstrip("\n"), self.fault.format())


class TestIsFault(TestCase):
    def testTaxonomyErrors(self):
        self.assertTrue(isfault(ConfigurationError("x")))

    def testFaultLikeObjects(self):
        class Foreign:
            code = "E_FOREIGN"

            def format(self, ui=None):
                return "foreign"

        self.assertTrue(isfault(Foreign()))

    def testOtherExceptions(self):
        self.assertFalse(isfault(ValueError("x")))
        self.assertFalse(isfault(None))


if __name__ == "__main__":
    unittest.main()
