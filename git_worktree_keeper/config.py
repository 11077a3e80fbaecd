"""Configuration handling for git-worktree-keeper"""

import re
from dataclasses import dataclass, field
from typing import Optional, List

from git_worktree_keeper.constants import DEFAULT_PROTECTED_BRANCHES, DEFAULT_TEMP_STASH_PATTERNS


@dataclass
class Config:
    """Configuration for git-worktree-keeper with validation."""

    # Branch policy
    protected_branches: List[str] = field(default_factory=lambda: list(DEFAULT_PROTECTED_BRANCHES))
    main_branch: str = "main"
    remote_name: str = "origin"

    # Stash policy
    stash_stale_days: int = 30
    temp_stash_patterns: List[str] = field(default_factory=lambda: list(DEFAULT_TEMP_STASH_PATTERNS))

    # Execution modes
    dry_run: bool = False
    verbose: bool = False
    debug: bool = False
    output_format: str = "text"  # text, table

    # GitHub integration
    bypass_github: bool = False
    github_token: Optional[str] = None

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._validate_stash_stale_days()
        self._validate_main_branch()
        self._validate_protected_branches()
        self._validate_temp_stash_patterns()
        self._validate_output_format()

    def _validate_stash_stale_days(self):
        """Validate stash_stale_days is positive."""
        if self.stash_stale_days <= 0:
            raise ValueError(f"stash_stale_days must be positive, got {self.stash_stale_days}")

    def _validate_main_branch(self):
        """Validate main_branch is not empty."""
        if not self.main_branch or not self.main_branch.strip():
            raise ValueError("main_branch cannot be empty")
        self.main_branch = self.main_branch.strip()

    def _validate_protected_branches(self):
        """Validate protected_branches list."""
        if not isinstance(self.protected_branches, list):
            raise ValueError("protected_branches must be a list")

        # Ensure main_branch is in protected_branches
        if self.main_branch not in self.protected_branches:
            self.protected_branches.append(self.main_branch)

    def _validate_temp_stash_patterns(self):
        """Validate every temp stash pattern compiles."""
        for pattern in self.temp_stash_patterns:
            try:
                re.compile(pattern)
            except re.error as e:
                raise ValueError(f"invalid temp stash pattern '{pattern}': {e}")

    def _validate_output_format(self):
        allowed = ["text", "table"]
        if self.output_format not in allowed:
            raise ValueError(f"output_format must be one of {allowed}, got '{self.output_format}'")

    def to_dict(self) -> dict:
        """Convert config to dictionary."""
        return {
            "protected_branches": self.protected_branches,
            "main_branch": self.main_branch,
            "remote_name": self.remote_name,
            "stash_stale_days": self.stash_stale_days,
            "temp_stash_patterns": self.temp_stash_patterns,
            "dry_run": self.dry_run,
            "verbose": self.verbose,
            "debug": self.debug,
            "output_format": self.output_format,
            "bypass_github": self.bypass_github,
            "github_token": self.github_token,
        }

    def get(self, key: str, default=None):
        """Get config value by key."""
        return getattr(self, key, default)

    @classmethod
    def from_dict(cls, config_dict: dict) -> "Config":
        """Create Config from dictionary."""
        # Extract only known fields
        known_fields = {
            "protected_branches",
            "main_branch",
            "remote_name",
            "stash_stale_days",
            "temp_stash_patterns",
            "dry_run",
            "verbose",
            "debug",
            "output_format",
            "bypass_github",
            "github_token",
        }

        filtered = {k: v for k, v in config_dict.items() if k in known_fields}
        return cls(**filtered)
