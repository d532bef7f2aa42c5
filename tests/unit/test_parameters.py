"""Unit tests for the command parameter resolver."""

import pytest

from bob.commands.base import resolve_parameters
from bob.core.models import BranchName, Script, TravisTarget
from bob.exceptions import (
    BranchRequired,
    MissingBranchArgument,
    NoParameters,
    TooManyParameters,
    UnknownTarget,
)

IOS = TravisTarget("ios", Script("fastlane ios beta"))
ANDROID = TravisTarget("android", Script("fastlane android beta"))
DEVELOP = BranchName("develop")


class TestBranchRequired:
    """Resolver used by `bump`: no targets, branch mandatory."""

    def test_branch_flag(self):
        """Test `-b release` resolves the branch."""
        resolved = resolve_parameters(["-b", "release"], command="bump")

        assert resolved.branch == BranchName("release")
        assert resolved.target is None

    def test_no_tokens(self):
        """Test empty tokens fail with BranchRequired."""
        with pytest.raises(BranchRequired):
            resolve_parameters([], command="bump")

    def test_flag_without_argument(self):
        with pytest.raises(MissingBranchArgument):
            resolve_parameters(["-b"], command="bump")

    def test_excess_tokens_rejected(self):
        """Test leftover tokens are rejected like in the trigger command."""
        with pytest.raises(TooManyParameters) as exc_info:
            resolve_parameters(["-b", "release", "now"], command="bump")

        assert exc_info.value.excess == ["now"]

    def test_flag_anywhere(self):
        """Test `-b` is found after other tokens."""
        with pytest.raises(TooManyParameters):
            resolve_parameters(["x", "-b", "main"], command="bump")


class TestSingleTarget:
    """Resolver with exactly one configured target."""

    def test_no_target_token_consumed(self):
        """Test the only target is used and `-b main` resolves."""
        resolved = resolve_parameters(
            ["-b", "main"], command="beta", targets=[IOS], default_branch=DEVELOP,
        )

        assert resolved.target == IOS
        assert resolved.branch == BranchName("main")

    def test_defaults_branch(self):
        resolved = resolve_parameters([], command="beta", targets=[IOS], default_branch=DEVELOP)

        assert resolved.target == IOS
        assert resolved.branch == DEVELOP

    def test_target_name_is_excess(self):
        """Test typing the target name with a single target is an error."""
        with pytest.raises(TooManyParameters):
            resolve_parameters(["ios"], command="beta", targets=[IOS], default_branch=DEVELOP)


class TestMultipleTargets:
    """Resolver with several configured targets."""

    def test_target_and_default_branch(self):
        """Test `android` picks the target and the default branch."""
        resolved = resolve_parameters(
            ["android"], command="beta", targets=[IOS, ANDROID], default_branch=DEVELOP,
        )

        assert resolved.target == ANDROID
        assert resolved.branch == DEVELOP

    def test_target_and_branch(self):
        resolved = resolve_parameters(
            ["ios", "-b", "feature/x"], command="beta", targets=[IOS, ANDROID], default_branch=DEVELOP,
        )

        assert resolved.target == IOS
        assert resolved.branch == BranchName("feature/x")

    def test_unknown_target(self):
        with pytest.raises(UnknownTarget) as exc_info:
            resolve_parameters(["web"], command="beta", targets=[IOS, ANDROID], default_branch=DEVELOP)

        assert exc_info.value.name == "web"

    def test_no_parameters(self):
        with pytest.raises(NoParameters):
            resolve_parameters([], command="beta", targets=[IOS, ANDROID], default_branch=DEVELOP)

    def test_too_many(self):
        with pytest.raises(TooManyParameters):
            resolve_parameters(
                ["ios", "-b", "main", "please"], command="beta",
                targets=[IOS, ANDROID], default_branch=DEVELOP,
            )

    def test_missing_branch_argument(self):
        with pytest.raises(MissingBranchArgument):
            resolve_parameters(["ios", "-b"], command="beta", targets=[IOS, ANDROID], default_branch=DEVELOP)
