"""
Pytest configuration for unit tests.

Provides sample XBRL documents, archive builders and config isolation
shared by all unit tests.
"""

import zipfile
from pathlib import Path

import pytest


SAMPLE_XBRL = """<?xml version="1.0" encoding="UTF-8"?>
<xbrli:xbrl xmlns:xbrli="http://www.xbrl.org/2003/instance"
    xmlns:xbrldi="http://xbrl.org/2006/xbrldi"
    xmlns:iso4217="http://www.xbrl.org/2003/iso4217"
    xmlns:jppfs_cor="http://disclosure.edinet-fsa.go.jp/taxonomy/jppfs/2013-08-31/jppfs_cor">
  <xbrli:context id="CurrentYTDDuration">
    <xbrli:entity>
      <xbrli:identifier scheme="http://disclosure.edinet-fsa.go.jp">E01234-000</xbrli:identifier>
    </xbrli:entity>
    <xbrli:period>
      <xbrli:startDate>2015-01-01</xbrli:startDate>
      <xbrli:endDate>2015-03-31</xbrli:endDate>
    </xbrli:period>
  </xbrli:context>
  <xbrli:context id="CurrentQuarterInstant">
    <xbrli:entity>
      <xbrli:identifier scheme="http://disclosure.edinet-fsa.go.jp">E01234-000</xbrli:identifier>
    </xbrli:entity>
    <xbrli:period>
      <xbrli:instant>2015-03-31</xbrli:instant>
    </xbrli:period>
  </xbrli:context>
  <xbrli:context id="Prior1YTDDuration">
    <xbrli:entity>
      <xbrli:identifier scheme="http://disclosure.edinet-fsa.go.jp">E01234-000</xbrli:identifier>
    </xbrli:entity>
    <xbrli:period>
      <xbrli:startDate>2014-01-01</xbrli:startDate>
      <xbrli:endDate>2014-03-31</xbrli:endDate>
    </xbrli:period>
  </xbrli:context>
  <xbrli:unit id="JPY">
    <xbrli:measure>iso4217:JPY</xbrli:measure>
  </xbrli:unit>
  <jppfs_cor:NetSales contextRef="CurrentYTDDuration" unitRef="JPY" decimals="-6">1000</jppfs_cor:NetSales>
  <jppfs_cor:CostOfSales contextRef="CurrentYTDDuration" unitRef="JPY" decimals="-6">400</jppfs_cor:CostOfSales>
  <jppfs_cor:NetSales contextRef="Prior1YTDDuration" unitRef="JPY" decimals="-6">900</jppfs_cor:NetSales>
  <jppfs_cor:Assets contextRef="CurrentQuarterInstant" unitRef="JPY" decimals="-6">5000</jppfs_cor:Assets>
  <jppfs_cor:Liabilities contextRef="CurrentQuarterInstant" unitRef="JPY" decimals="-6">3000</jppfs_cor:Liabilities>
  <jppfs_cor:NetAssets contextRef="CurrentQuarterInstant" unitRef="JPY" decimals="-6">2000</jppfs_cor:NetAssets>
</xbrli:xbrl>
"""

# root + 3 contexts (6 + 5 + 6) + unit (2) + 6 facts
SAMPLE_XBRL_ELEMENT_COUNT = 26

XBRL_MEMBER = 'XBRL/PublicDoc/jpcrp040300-q1r-001_E01234-000_2015-03-31_01_2015-05-15.xbrl'


def wrap_facts(facts: str) -> str:
    """Wrap fact elements in a minimal xbrli:xbrl root with the jppfs_cor namespace."""
    return (
        '<xbrli:xbrl xmlns:xbrli="http://www.xbrl.org/2003/instance" '
        'xmlns:jppfs_cor="http://disclosure.edinet-fsa.go.jp/taxonomy/jppfs/2013-08-31/jppfs_cor">'
        f'{facts}'
        '</xbrli:xbrl>'
    )


def write_xbrl_zip(path: Path, xbrl_text: str, member: str = XBRL_MEMBER) -> Path:
    """Write an EDINET-style archive holding xbrl_text plus unrelated members."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(path, 'w') as zf:
        zf.writestr('XBRL/PublicDoc/manifest_PublicDoc.xml', '<manifest/>')
        zf.writestr(member, xbrl_text.encode('utf-8'))
        zf.writestr('XBRL/AuditDoc/jpaud-qrr-cc-001.xbrl', '<other/>')
    return path


@pytest.fixture
def sample_xbrl() -> str:
    return SAMPLE_XBRL


@pytest.fixture
def sample_zip(tmp_path) -> Path:
    """Archive at {tmp_path}/xbrl/S1005ABC_xbrl.zip containing SAMPLE_XBRL."""
    return write_xbrl_zip(tmp_path / 'xbrl' / 'S1005ABC_xbrl.zip', SAMPLE_XBRL)


@pytest.fixture(autouse=True)
def reset_config_singletons():
    """
    Reset the config facades before and after every test.

    Tests that patch os.environ would otherwise see a cached AppConfig.
    """
    import edinet_facts.config as config_module

    config_module._app_config = None
    config_module._fact_mappings = None
    yield
    config_module._app_config = None
    config_module._fact_mappings = None
