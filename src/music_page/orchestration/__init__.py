"""Pipeline orchestration from Dropbox folder to published page."""
