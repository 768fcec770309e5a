"""Shared constants."""

from typing import FrozenSet, List, Tuple

# Default exclusion patterns, relative to the project root
DEFAULT_EXCLUDE: List[str] = [
    "**/*.stories.tsx",
    "**/*.stories.ts",
    "**/*.spec.ts",
    "**/*.spec.tsx",
    "**/*.test.ts",
    "**/*.test.tsx",
    "**/*.d.ts",
    "**/*.config.ts",
    "**/*.config.tsx",
    "**/__mocks__/**",
    "node_modules/**",
    ".git/**",
    ".next/**",
    "dist/**",
    "out/**",
    "build/**",
    "coverage/**",
]

DEFAULT_EXTENSIONS: Tuple[str, ...] = (".ts", ".tsx")

JS_EXTENSIONS: Tuple[str, ...] = (".js", ".jsx")

# Exact texts accepted as the client directive statement
CLIENT_DIRECTIVES: FrozenSet[str] = frozenset(
    {
        "'use client'",
        '"use client"',
        "'use client';",
        '"use client";',
    }
)

DEFAULT_TSCONFIG = "tsconfig.json"

# Import specifiers with these extensions name assets, never TypeScript sources
ASSET_EXTENSIONS: FrozenSet[str] = frozenset(
    {
        ".css",
        ".scss",
        ".sass",
        ".less",
        ".styl",
        ".json",
        ".yaml",
        ".yml",
        ".graphql",
        ".gql",
        ".md",
        ".txt",
        ".html",
        ".svg",
        ".png",
        ".jpg",
        ".jpeg",
        ".gif",
        ".webp",
        ".avif",
        ".ico",
        ".bmp",
        ".woff",
        ".woff2",
        ".ttf",
        ".otf",
        ".eot",
        ".mp4",
        ".webm",
        ".mp3",
        ".wav",
        ".wasm",
    }
)
