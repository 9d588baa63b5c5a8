"""Unit tests for command-line parsing."""

from decimal import Decimal

import pytest

from amm_ops.cli.main import build_parser, main
from amm_ops.core.settings import OperationSettings
from amm_ops.operations import OPERATIONS


def parse(*argv):
    args = build_parser().parse_args(list(argv))
    return args, OperationSettings.from_args(args)


class TestParser:
    """Subcommands and their flags."""

    def test_every_operation_has_a_subcommand(self):
        parser = build_parser()
        for name, operation in OPERATIONS.items():
            args = parser.parse_args([name] + {
                "collect": ["--token-id", "1"],
                "remove-liquidity": ["--token-id", "1"],
                "query-fees": ["--token-id", "1"],
                "transfer": ["--recipient", "0x" + "11" * 20],
                "open-trading": ["--l2-block", "1", "--limit", "2"],
            }.get(name, []))
            assert args.operation is operation

    def test_collect(self):
        args, settings = parse("collect", "--token-id", "42", "--strict", "--network", "sepolia")

        assert args.operation is OPERATIONS["collect"]
        assert settings.token_id == 42
        assert settings.strict is True
        assert settings.network == "sepolia"

    def test_token_id_camel_case_alias(self):
        _, settings = parse("query-fees", "--tokenId", "42")

        assert settings.token_id == 42

    def test_defaults_are_left_to_operations(self):
        _, settings = parse("swap")

        assert settings == OperationSettings()

    def test_amounts_are_decimal(self):
        _, settings = parse("swap", "--amount", "1.25", "--min-out", "1", "--reverse")

        assert settings.amount == Decimal("1.25")
        assert settings.min_out == Decimal("1")
        assert settings.reverse is True

    def test_token_names(self):
        _, settings = parse("deploy-tokens", "--token", "Alpha", "ALP", "--token", "Beta", "BET")

        assert settings.token_names == (("Alpha", "ALP"), ("Beta", "BET"))

    def test_open_trading_roots(self):
        _, settings = parse("open-trading", "--roots", "0x01", "0x02", "--l2-block", "7", "--limit", "100")

        assert settings.output_roots == ("0x01", "0x02")
        assert settings.l2_block_number == 7
        assert settings.new_limit == 100

    def test_manifest_and_deadline(self):
        _, settings = parse("add-liquidity", "--manifest", "pool", "--deadline-minutes", "5",
                            "--tick-lower", "-600", "--tick-upper", "600")

        assert settings.manifest == "pool"
        assert settings.deadline_minutes == 5
        assert (settings.tick_lower, settings.tick_upper) == (-600, 600)

    @pytest.mark.parametrize("value", ["-1", "abc", "nan", "inf"])
    def test_rejects_bad_amounts(self, value):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["swap", "--amount", value])

    def test_collect_requires_token_id(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["collect"])


class TestMain:
    def test_no_command(self, capsys):
        with pytest.raises(SystemExit) as info:
            main([])

        assert info.value.code == 1
        assert "usage" in capsys.readouterr().out
