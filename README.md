# kingfisher

Building blocks for tools that look for secrets in files, Git data and
hosted repositories: Git blob identifiers, commit metadata and timestamps,
validated HTTPS repository URLs, byte-string interning, option sets for
scanning, a filesystem walker with gitignore-style filtering, and listing
of repositories on GitHub and GitLab.

Requires Python 3.10 or later. The only runtime dependency is `requests`.

## Git blobs

```python
from kingfisher.blob import Blob, BlobId, BlobIdMap, BlobMetadata

BlobId.compute(b"").hex()   # "e69de29bb2d1d6434b8b29ae775ad8c2e48c5391"
BlobId.from_hex("e69de29bb2d1d6434b8b29ae775ad8c2e48c5391")

blob = Blob.from_bytes(b"some content")
same = Blob.from_file("some/file.txt")   # reads the file and hashes it

seen = BlobIdMap()
seen.insert(blob.id, 1)     # returns the previous value, here None
seen.get(blob.id)           # 1
blob.id in seen             # True

BlobMetadata(id=blob.id, num_bytes=1_048_576).num_megabytes()   # 1.0
```

Blob ids are computed as Git computes them (SHA-1 over `blob <size>\0`
followed by the content), so they match object ids in any repository.
`BlobIdMap` is safe to use from several threads at once. `from_hex` raises
`ValueError` for anything that is not 20 hex-encoded bytes.

`BlobAppearance` records where a blob was seen: a `CommitMetadata` and the
path (as bytes) the blob had in that commit.

## Commit metadata and timestamps

```python
from kingfisher.commit_metadata import CommitMetadata, GitTime, parse_signature_time

t = GitTime.parse("1700000000 +0100")   # GitTime(seconds=1700000000, offset=3600)
str(t)                                  # "1700000000 +0100"

parse_signature_time(b"not a time")     # GitTime(0, 0): falls back to the epoch

meta = CommitMetadata(
    commit_id="a" * 40,
    committer_name="Example Person",
    committer_email="person@example.com",
    committer_timestamp=t,
)
CommitMetadata.from_dict(meta.to_dict()) == meta   # True
```

`GitTime.parse` accepts the raw `<seconds> <+hhmm>` form, bare Unix
seconds, ISO 8601 and RFC 2822 dates, and raises `ValueError` for anything
else. Names and e-mail addresses are kept as bytes and decoded with
replacement characters by `to_dict`.

## Repository URLs

`GitUrl` accepts only `https` URLs without credentials, query parameters
or fragments. Dot segments are resolved, and the URL maps to a relative
path suitable for a clone directory:

```python
from kingfisher.git_url import GitUrl

url = GitUrl.parse("https://example.com/root/../project.git")
str(url)        # "https://example.com/project.git"
url.to_path()   # PurePosixPath("https/example.com/project.git")
```

Unacceptable URLs raise `GitUrlError`, a subclass of `ValueError`.

## Interning byte strings

```python
from kingfisher.string_table import BytesTable

table = BytesTable()
foo = table.get_or_intern(b"foo")
table.get_or_intern(b"foo") == foo   # True
table.resolve(foo)                   # b"foo"
```

## Options

`kingfisher.options` holds the option sets a scanning tool works with:

- `GlobalArgs`: `verbose`, `quiet`, `ignore_certs`, `rlimit_nofile`,
  `color` and `progress` (each a `Mode`: `AUTO`, `NEVER` or `ALWAYS`).
  `quiet` turns progress off. `use_color(stream)`, `use_progress()` and
  `log_level()` (INFO, DEBUG for one `-v`, and a `TRACE` level below DEBUG
  for more) decide the details.
- `ContentFilteringArgs`: maximum file size in MB (default 25), ignore
  files, archive extraction and its depth (1 to 25, default 2), and
  whether to skip binary files. `max_file_size_bytes()` converts the limit
  to bytes, treating a negative size as 25 MB.
- `OutputArgs`: an optional output path and a format. `open_writer()` is a
  context manager yielding the output file, or standard output when no
  path is given.
- `RuleSpecifierArgs`: extra rule paths, enabled rule set ids (default
  `["all"]`) and whether to load built-in rules.
- The enums `ConfidenceLevel`, `ReportOutputFormat` and
  `RulesListOutputFormat`, ordered as declared.
- `default_scan_jobs()`: the CPU count, capped at one job per 4 GB of RAM.

## Walking the filesystem

```python
from kingfisher.enumerator import DirectoryResult, FileResult, FilesystemEnumerator

enumerator = FilesystemEnumerator(["project"], max_file_size=10 * 1024 * 1024)
enumerator.add_ignore("project/.scanignore")          # gitignore-style patterns
enumerator.filter_entry(lambda path: path.name != "node_modules")

for found in enumerator.run():
    if isinstance(found, FileResult):
        print(found.path, found.num_bytes)
```

`run()` yields a `DirectoryResult` for each directory and a `FileResult`
for each regular file no larger than the limit, in a stable, sorted,
depth-first order. Symbolic links are skipped unless `follow_links=True`,
in which case loops are detected. `FilesystemEnumerator.from_content_filtering`
builds an enumerator from a `ContentFilteringArgs`. `IgnoreMatcher` can
also be used on its own.

## Listing hosted repositories

```python
from kingfisher.github import GitHubRepoType, RepoSpecifiers, enumerate_repo_urls

urls = enumerate_repo_urls(
    RepoSpecifiers(organization=["example-org"], repo_filter=GitHubRepoType.ALL)
)
```

`kingfisher.github.enumerate_repo_urls` and
`kingfisher.gitlab.enumerate_repo_urls` return the clone URLs of the
repositories belonging to the given users and organizations (GitHub) or
users and groups (GitLab), sorted and without duplicates. An optional
`progress` callable is called with `1` after each user, organization or
group. `list_repositories` in either module prints the URLs one per line,
with an optional progress line on standard error.

An access token is read from `KF_GITHUB_TOKEN` or `KF_GITLAB_TOKEN` when
set; otherwise requests are anonymous. `ignore_certs=True` turns off TLS
certificate checks. HTTP errors raise `requests.HTTPError`; an unknown
GitLab user raises `GitLabUserNotFound`.

## What this package does not do

It has no command-line program, no rules or pattern-matching engine and no
report writer; it does not tell text from binary content, guess file types
or languages, clone repositories or read Git object databases. It provides
the pieces listed above for a program that does.

## Running the tests

Install the `test` extra and run `pytest` from the project root.