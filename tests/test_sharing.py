import pytest

from shamscloud.errors import (Forbidden, InvalidPassword, IsAFolder, NotAFolder, NotFound, PasswordRequired,
                               ValidationError)
from shamscloud.records import ShareType
from .conftest import make_upload


@pytest.fixture
async def owner(user_factory):
    return await user_factory("owner@example.com")


@pytest.fixture
async def report(services, owner):
    [file] = await services.files.upload_files(owner, [make_upload("report.pdf", b"%PDF-1.7 body", "application/pdf")])
    return file


@pytest.fixture
async def tree(services, owner):
    """shared/{a.txt, sub/{b.txt}} plus a sibling outside/{secret.txt}"""
    shared = await services.files.create_folder(owner, "shared")
    sub = await services.files.create_folder(owner, "sub", shared.id)
    [a] = await services.files.upload_files(owner, [make_upload("a.txt", b"A")], shared.id)
    [b] = await services.files.upload_files(owner, [make_upload("b.txt", b"B")], sub.id)
    outside = await services.files.create_folder(owner, "outside")
    [secret] = await services.files.upload_files(owner, [make_upload("secret.txt", b"S")], outside.id)
    return {"shared": shared, "sub": sub, "a": a, "b": b, "outside": outside, "secret": secret}


async def test_share_link_shapes(services, owner, report, tree):
    direct = await services.sharing.share(owner, report.id, ShareType.DIRECT, False, base_url="https://cloud.test/")
    assert direct.share_link == f"https://cloud.test/api/public/download/{direct.public_token}"
    assert len(direct.public_token) >= 21

    page = await services.sharing.share(owner, report.id, ShareType.PAGE, False, base_url="https://cloud.test")
    assert page.share_link == f"https://cloud.test/shared/{page.public_token}"

    browse = await services.sharing.share(owner, tree["shared"].id, ShareType.BROWSE, False, base_url="https://cloud.test")
    assert browse.share_link == f"https://cloud.test/browse/{browse.public_token}"


async def test_reshare_replaces_token(services, owner, report):
    first = await services.sharing.share(owner, report.id, ShareType.PAGE, False)
    second = await services.sharing.share(owner, report.id, ShareType.PAGE, False)
    assert first.public_token != second.public_token
    with pytest.raises(NotFound):
        await services.sharing.get_public_info(first.public_token)
    assert (await services.sharing.get_public_info(second.public_token)).id == report.id


async def test_unshare_revokes_token(services, owner, report):
    link = await services.sharing.share(owner, report.id, ShareType.PAGE, False)
    info = await services.sharing.get_public_info(link.public_token)
    assert info.name == "report.pdf"

    await services.sharing.unshare(owner, report.id)

    with pytest.raises(NotFound):
        await services.sharing.get_public_info(link.public_token)
    with pytest.raises(NotFound):
        await services.sharing.public_download(link.public_token)
    stored = await services.storage.get_file(report.id)
    assert (stored.is_public, stored.public_token, stored.share_type, stored.share_password) == (False, None, None, None)


async def test_password_protected_download(services, owner, report):
    link = await services.sharing.share(owner, report.id, ShareType.PAGE, True, password="hunter22")
    stored = await services.storage.get_file(report.id)
    assert stored.share_password and stored.share_password != "hunter22"

    with pytest.raises(PasswordRequired):
        await services.sharing.public_download(link.public_token)
    with pytest.raises(InvalidPassword):
        await services.sharing.public_download(link.public_token, "wrong")

    file, path = await services.sharing.public_download(link.public_token, "hunter22")
    assert file.id == report.id
    assert path.read_bytes() == b"%PDF-1.7 body"


async def test_public_info_needs_no_password(services, owner, report):
    link = await services.sharing.share(owner, report.id, ShareType.PAGE, True, password="hunter22")
    info = await services.sharing.get_public_info(link.public_token)
    assert info.is_password_protected
    assert info.share_type is ShareType.PAGE


async def test_share_validation(services, owner, report, tree):
    with pytest.raises(ValidationError):
        await services.sharing.share(owner, report.id, ShareType.DIRECT, True, password="hunter22")
    with pytest.raises(ValidationError):
        await services.sharing.share(owner, report.id, ShareType.PAGE, True)
    with pytest.raises(NotAFolder):
        await services.sharing.share(owner, report.id, ShareType.BROWSE, False)
    with pytest.raises(IsAFolder):
        await services.sharing.share(owner, tree["shared"].id, ShareType.DIRECT, False)


async def test_share_password_longer_than_bcrypt_limit(services, owner, report):
    with pytest.raises(ValidationError):
        await services.sharing.share(owner, report.id, ShareType.PAGE, True, password="x" * 80)
    assert not (await services.storage.get_file(report.id)).is_public


async def test_only_owner_can_share(services, user_factory, report):
    stranger = await user_factory("stranger@example.com")
    with pytest.raises(Forbidden):
        await services.sharing.share(stranger, report.id, ShareType.PAGE, False)
    with pytest.raises(Forbidden):
        await services.sharing.unshare(stranger, report.id)


async def test_browse_navigation(services, owner, tree):
    link = await services.sharing.share(owner, tree["shared"].id, ShareType.BROWSE, False)

    listing = await services.sharing.browse_folder(link.public_token)
    assert listing.folder.id == tree["shared"].id
    assert [f.name for f in listing.files] == ["sub", "a.txt"]

    listing = await services.sharing.browse_folder(link.public_token, folder_id=tree["sub"].id)
    assert listing.root.id == tree["shared"].id
    assert [f.name for f in listing.files] == ["b.txt"]

    with pytest.raises(NotFound):
        await services.sharing.browse_folder(link.public_token, folder_id=tree["outside"].id)


async def test_browse_download_stays_inside_shared_tree(services, owner, tree):
    link = await services.sharing.share(owner, tree["shared"].id, ShareType.BROWSE, False)

    file, path = await services.sharing.download_from_browsed_folder(link.public_token, tree["b"].id)
    assert path.read_bytes() == b"B"

    with pytest.raises(NotFound):
        await services.sharing.download_from_browsed_folder(link.public_token, tree["secret"].id)
    with pytest.raises(NotFound):
        await services.sharing.download_from_browsed_folder(link.public_token, tree["shared"].id)


async def test_browse_password_gate(services, owner, tree):
    link = await services.sharing.share(owner, tree["shared"].id, ShareType.BROWSE, True, password="open-sesame")

    with pytest.raises(PasswordRequired):
        await services.sharing.browse_folder(link.public_token)
    with pytest.raises(InvalidPassword):
        await services.sharing.browse_folder(link.public_token, "nope")
    with pytest.raises(PasswordRequired):
        await services.sharing.download_from_browsed_folder(link.public_token, tree["a"].id)

    listing = await services.sharing.browse_folder(link.public_token, "open-sesame")
    assert listing.root.is_password_protected
    _, path = await services.sharing.download_from_browsed_folder(link.public_token, tree["a"].id, "open-sesame")
    assert path.read_bytes() == b"A"


async def test_browse_requires_browse_share(services, owner, report):
    link = await services.sharing.share(owner, report.id, ShareType.PAGE, False)
    with pytest.raises(NotFound):
        await services.sharing.browse_folder(link.public_token)
