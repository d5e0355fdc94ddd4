"""Shared fixtures: a small Convex project on disk."""

from pathlib import Path

import pytest


SCHEMA_TS = """\
import { defineSchema, defineTable } from "convex/server";
import { v } from "convex/values";

export default defineSchema({
  users: defineTable({
    name: v.string(),
    email: v.string(),
    avatarUrl: v.optional(v.string()),
    role: v.union(v.literal("admin"), v.literal("member")),
    createdAt: v.number(),
  })
    .index("by_email", ["email"])
    .index("by_role", ["role", "createdAt"]),

  projects: defineTable({
    name: v.string(),
    description: v.optional(v.string()),
    isArchived: v.boolean(),
  }),

  tasks: defineTable({
    title: v.string(),
    projectId: v.id("projects"),
    assigneeId: v.optional(v.id("users")),
    status: v.union(v.literal("todo"), v.literal("in_progress"), v.literal("done")),
    dueDate: v.optional(v.number()),
  })
    .index("by_project", ["projectId", "status"])
    .index("by_assignee", ["assigneeId"])
    .index("by_status", ["status"]),

  messages: defineTable({
    authorId: v.id("users"),
    content: v.string(),
  })
    .searchIndex("search_content", {
      searchField: "content",
      filterFields: ["authorId"],
    }),
});
"""

TASKS_TS = """\
import { query } from "./_generated/server";
import { v } from "convex/values";

// Good: uses index
export const listByProject = query({
  args: { projectId: v.id("projects") },
  handler: async (ctx, args) => {
    return await ctx.db
      .query("tasks")
      .withIndex("by_project", (q) => q.eq("projectId", args.projectId))
      .collect();
  },
});

// Bad: full table scan with collect
export const listAll = query({
  handler: async (ctx) => {
    return await ctx.db.query("tasks").collect();
  },
});

// Medium: uses index but no range constraint
export const listByStatus = query({
  args: { status: v.string() },
  handler: async (ctx, args) => {
    return await ctx.db
      .query("tasks")
      .withIndex("by_status")
      .filter((q) => q.eq(q.field("status"), args.status))
      .collect();
  },
});

// Bad: references non-existent index
export const listByDueDate = query({
  handler: async (ctx) => {
    return await ctx.db
      .query("tasks")
      .withIndex("by_due_date")
      .collect();
  },
});
"""


@pytest.fixture
def convex_project(tmp_path) -> Path:
    """A project root with convex/schema.ts and convex/tasks.ts."""
    convex_dir = tmp_path / "convex"
    convex_dir.mkdir()
    (convex_dir / "schema.ts").write_text(SCHEMA_TS, encoding="utf-8")
    (convex_dir / "tasks.ts").write_text(TASKS_TS, encoding="utf-8")
    return tmp_path


@pytest.fixture
def snapshot_dir(tmp_path, monkeypatch) -> Path:
    """Point SCHEMA_INTEL_SNAPSHOT_DIR at a temporary directory."""
    directory = tmp_path / "snapshots"
    monkeypatch.setenv("SCHEMA_INTEL_SNAPSHOT_DIR", str(directory))
    return directory
