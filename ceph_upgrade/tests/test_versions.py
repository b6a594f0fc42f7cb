import pytest

from ceph_upgrade import versions
from ceph_upgrade.exceptions import DecodeFailure, ParseFailure, QueryFailure, UnknownDaemonType
from ceph_upgrade.tests.conftest import NAUTILUS, OCTOPUS, OCTOPUS_DEV


class TestExtractCephVersion(object):

    def test_stable_release(self):
        version = versions.extract_ceph_version(NAUTILUS)
        assert version.key == (14, 2, 8, 0)
        assert version.commit_id == '2d095e947a02261ce61424021bb43bd3022d35cb'
        assert version.release == 'nautilus'

    def test_dev_build(self):
        version = versions.extract_ceph_version(OCTOPUS_DEV)
        assert version.key == (15, 0, 0, 12)
        assert version.commit_id == '6c8fb920cb1d862f36ee852ed849a15f9a50bd68'
        assert version.release == 'octopus'

    def test_release_falls_back_to_major(self):
        version = versions.extract_ceph_version('ceph version 18.2.1')
        assert version.release == 'reef'

    def test_unknown_major(self):
        version = versions.extract_ceph_version('ceph version 99.0.0')
        assert version.release == 'unknown'

    def test_downstream_suffix(self):
        version = versions.extract_ceph_version(
            'ceph version 16.2.0-117.el8cp (0e34bb74700060ebfaa22d99b7d2cdc037b28a57) pacific (stable)')
        assert version.key == (16, 2, 0, 117)
        assert version.release == 'pacific'

    @pytest.mark.parametrize('source', [
        '',
        'ceph version',
        'ceph version 14.2',
        'version 14.2.8',
        'not a version at all',
        None,
    ])
    def test_malformed_strings_fail(self, source):
        with pytest.raises(ParseFailure):
            versions.extract_ceph_version(source)

    @pytest.mark.parametrize('source', [NAUTILUS, OCTOPUS, OCTOPUS_DEV])
    def test_rendering_parses_back(self, source):
        version = versions.extract_ceph_version(source)
        rendered = versions.extract_ceph_version(str(version))
        assert rendered == version
        assert rendered.commit_id == version.commit_id
        assert rendered.release == version.release


class TestCephVersion(object):

    def test_ordering(self):
        assert versions.CephVersion(14, 2, 8) < versions.CephVersion(15, 2, 0)
        assert versions.CephVersion(15, 0, 0, 12) > versions.CephVersion(15, 0, 0)
        assert versions.CephVersion(15, 0, 0, 12) < versions.CephVersion(15, 0, 1)

    def test_commit_and_release_do_not_matter_for_equality(self):
        one = versions.CephVersion(15, 2, 0, commit_id='abc', release='octopus')
        other = versions.CephVersion(15, 2, 0, commit_id='def', release='unknown')
        assert one == other
        assert hash(one) == hash(other)


class TestDaemonVersions(object):

    def test_missing_keys_are_empty(self):
        census = versions.DaemonVersions.from_json({'mon': {NAUTILUS: 3}})
        assert census.for_daemon('mon') == {NAUTILUS: 3}
        assert census.for_daemon('osd') == {}
        assert census.for_daemon('rbd-mirror') == {}

    def test_extra_keys_are_ignored(self, make_census):
        data = make_census(mon={NAUTILUS: 3})
        data['tcmu-runner'] = {NAUTILUS: 1}
        census = versions.DaemonVersions.from_json(data)
        assert census.overall == {NAUTILUS: 3}

    def test_rbd_mirror(self, make_census):
        census = versions.DaemonVersions.from_json(make_census(rbd_mirror={OCTOPUS: 1}))
        assert census.for_daemon('rbd-mirror') == {OCTOPUS: 1}

    def test_nfs_has_no_entry(self, make_census):
        census = versions.DaemonVersions.from_json(make_census())
        with pytest.raises(UnknownDaemonType):
            census.for_daemon('nfs')

    @pytest.mark.parametrize('data', [
        [],
        'versions',
        {'mon': [NAUTILUS]},
        {'mon': {NAUTILUS: 'three'}},
        {'mon': {NAUTILUS: -1}},
        {'mon': {NAUTILUS: True}},
    ])
    def test_malformed(self, data):
        with pytest.raises(DecodeFailure):
            versions.DaemonVersions.from_json(data)


class TestGetMonVersion(object):

    def test_parses_output(self, fake_ceph):
        fake_ceph.set('version', NAUTILUS)
        assert versions.get_mon_version() == versions.CephVersion(14, 2, 8)

    def test_unparseable_output(self, fake_ceph):
        fake_ceph.set('version', 'nope')
        with pytest.raises(ParseFailure) as error:
            versions.get_mon_version()
        assert str(error.value) == "failed to extract ceph version: failed to parse version from: 'nope'"

    def test_query_failure(self, fake_ceph):
        fake_ceph.set('version', QueryFailure('timed out', returncode=110))
        with pytest.raises(QueryFailure):
            versions.get_mon_version()


class TestGetAllDaemonVersions(object):

    def test_decodes_census(self, fake_ceph, make_census):
        fake_ceph.set('versions', make_census(mon={NAUTILUS: 3}, osd={NAUTILUS: 2, OCTOPUS: 1}))
        census = versions.get_all_daemon_versions()
        assert census.for_daemon('osd') == {NAUTILUS: 2, OCTOPUS: 1}
        assert census.overall == {NAUTILUS: 5, OCTOPUS: 1}

    def test_not_json(self, fake_ceph):
        fake_ceph.set('versions', '{"mon": ')
        with pytest.raises(DecodeFailure):
            versions.get_all_daemon_versions()


class TestLeastUptodateVersion(object):

    def test_single_version(self, fake_ceph, make_census):
        fake_ceph.set('versions', make_census(mon={NAUTILUS: 3}))
        assert versions.least_uptodate_version('mon') == versions.CephVersion(14, 2, 8)

    def test_mixed_versions_returns_the_oldest(self, fake_ceph, make_census):
        fake_ceph.set('versions', make_census(osd={OCTOPUS: 2, NAUTILUS: 1}))
        version = versions.least_uptodate_version('osd')
        assert version == versions.CephVersion(14, 2, 8)
        assert version.release == 'nautilus'

    def test_warns_when_oldest_is_not_listed_first(self, fake_ceph, make_census, caplog):
        fake_ceph.set('versions', make_census(osd={OCTOPUS: 2, NAUTILUS: 1}))
        versions.least_uptodate_version('osd')
        assert 'more than one version' in caplog.text

    def test_nfs_is_rejected_before_querying(self, fake_ceph):
        with pytest.raises(UnknownDaemonType):
            versions.least_uptodate_version('nfs')
        assert fake_ceph.calls == []

    def test_unknown_type_is_rejected_before_querying(self, fake_ceph):
        with pytest.raises(UnknownDaemonType):
            versions.least_uptodate_version('crash')
        assert fake_ceph.calls == []

    def test_no_versions_for_type(self, fake_ceph, make_census):
        fake_ceph.set('versions', make_census(mon={NAUTILUS: 3}))
        with pytest.raises(ParseFailure) as error:
            versions.least_uptodate_version('rgw')
        assert 'no rgw versions' in str(error.value)

    def test_unparseable_entry(self, fake_ceph, make_census):
        fake_ceph.set('versions', make_census(mds={'garbage': 2}))
        with pytest.raises(ParseFailure) as error:
            versions.least_uptodate_version('mds')
        assert str(error.value).startswith('failed to extract ceph version: ')

    def test_census_failure_is_wrapped(self, fake_ceph):
        fake_ceph.set('versions', QueryFailure("failed to run 'ceph versions'. no mon", returncode=110))
        with pytest.raises(QueryFailure) as error:
            versions.least_uptodate_version('osd')
        assert 'failed to get ceph daemons versions: failed to run' in str(error.value)
        assert error.value.returncode == 110

    def test_uses_given_census(self, fake_ceph, make_census):
        census = versions.DaemonVersions.from_json(make_census(mgr={OCTOPUS: 2}))
        assert versions.least_uptodate_version('mgr', census).release == 'octopus'
        assert fake_ceph.calls == []

    def test_mimic_and_nautilus_mons(self, fake_ceph, make_census):
        fake_ceph.set('versions', make_census(mon={
            'ceph version 13.2.5 (cbff874f9007f1869bfd3821b7e33b2a6ffd4988) mimic (stable)': 1,
            'ceph version 14.2.0 (3a54b2b6d167d4a2a19e003a705696d4fe619afc) nautilus (stable)': 2,
        }))
        version = versions.least_uptodate_version('mon')
        assert version.key == (13, 2, 5, 0)
        assert version.release == 'mimic'
