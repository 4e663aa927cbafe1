# tests/dao/test_base_dao.py

from operator import attrgetter
from tenant_portability.dao.media.media_dao import MediaDao
from tenant_portability.dao.page.page_dao import PageLayoutDao
from tenant_portability.models import Media

def _count_queries(dao) -> list:
    """记录 get_list 的每次调用 (每次即一条 SQL)。"""
    calls = []
    original = dao.get_list

    async def counting(**kwargs):
        calls.append(kwargs)
        return await original(**kwargs)

    dao.get_list = counting
    return calls

async def test_get_list_in_splits_values_into_chunks(session_factory, seeded_tenant):
    ids = [seeded_tenant["hero"], seeded_tenant["banner"], seeded_tenant["trashed"]]

    async with session_factory() as session:
        dao = MediaDao(session)
        calls = _count_queries(dao)
        rows = await dao.get_list_in("id", ids, order=[Media.id.desc()], sort_key=attrgetter("id"), chunk_size=2)

    assert len(calls) == 2
    # 每批内部倒序，合并后按 sort_key 重新排序
    assert [m.id for m in rows] == sorted(ids)

async def test_get_list_in_applies_extra_conditions(session_factory, seeded_tenant):
    ids = [seeded_tenant["hero"], seeded_tenant["trashed"]]

    async with session_factory() as session:
        rows = await MediaDao(session).get_list_in("id", ids, where=[("is_deleted", "==", False)], chunk_size=1)

    assert [m.id for m in rows] == [seeded_tenant["hero"]]

async def test_get_list_in_with_no_values_skips_the_query(session_factory):
    async with session_factory() as session:
        dao = PageLayoutDao(session)
        calls = _count_queries(dao)
        assert await dao.list_by_pages([]) == []

    assert calls == []
