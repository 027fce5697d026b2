"""Tests for Gemfile parsing."""

from core.parse_ruby import parse_gemfile


def test_gems_with_and_without_versions():
    """Both quote styles are accepted; a gem without a version means latest."""
    content = """source "https://rubygems.org"

gem "rails", "~> 7.1.0"
gem 'puma'
gem "pg", ">= 1.1", "< 2.0"
gem "bootsnap", require: false
"""
    manifest = parse_gemfile(content)

    assert manifest.ecosystem == "ruby"
    assert manifest.as_dict() == {
        "rails": "~> 7.1.0",
        "puma": "latest",
        "pg": ">= 1.1",
        "bootsnap": "latest",
    }


def test_comments_and_groups_ignored():
    """Comment lines and group blocks do not produce entries."""
    content = """# gem "commented", "1.0"
group :development do
  gem "rubocop", "1.62.0"
end
"""
    assert parse_gemfile(content).as_dict() == {"rubocop": "1.62.0"}
