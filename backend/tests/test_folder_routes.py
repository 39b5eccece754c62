"""
TripFolders Backend — Route Tests
==================================

What:  The HTTP surface: which page renders, and where each outcome redirects.
How:   HTTPX AsyncClient over ASGITransport (no server); redirects are not
       followed so the Location header can be asserted directly.

What we test:
    ✅ Unauthenticated requests go to the entry page
    ✅ Create / edit / add / leave / delete redirect to the right view
    ✅ Refusals come back as ?errorMessage= on the originating form
    ✅ Private accounts see the listing page with the refusal message
    ✅ POST + ?_method= reaches the PUT/DELETE handlers
    ✅ Unknown or malformed folder ids land on the folder list
"""

import uuid
from urllib.parse import parse_qs, urlsplit

import pytest

from tripfolders.exceptions import Rejection
from tripfolders.models import User


def _location(response):
    """(path, errorMessage or None) from a redirect response."""
    assert response.status_code == 303
    parts = urlsplit(response.headers["location"])
    message = parse_qs(parts.query).get("errorMessage", [None])[0]
    return parts.path, message


async def _create(client, name="Lisbon", trip_date="2024-05-01") -> uuid.UUID:
    response = await client.post(
        "/tripFolders/create", data={"folderName": name, "tripDate": trip_date}
    )
    path, message = _location(response)
    assert message is None
    return uuid.UUID(path.rsplit("/", 1)[1])


class TestPublicPages:

    @pytest.mark.asyncio
    async def test_entry_page(self, client_for):
        client = await client_for()
        response = await client.get("/")
        assert response.status_code == 200
        assert "TripFolders" in response.text

    @pytest.mark.asyncio
    async def test_entry_page_shows_error_message(self, client_for):
        client = await client_for()
        response = await client.get("/", params={"errorMessage": "Please log in to continue."})
        assert "Please log in to continue." in response.text

    @pytest.mark.asyncio
    async def test_health(self, client_for):
        client = await client_for()
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json()["database"] == "connected"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "path", ["/tripFolders", "/tripFolders/private", "/tripFolders/shared", "/tripFolders/create"]
    )
    async def test_signed_out_requests_go_to_entry_page(self, client_for, path):
        client = await client_for()
        response = await client.get(path)
        target, message = _location(response)
        assert target == "/"
        assert message


class TestCreateAndList:

    @pytest.mark.asyncio
    async def test_create_redirects_to_folder_page(self, client_for, alice):
        client = await client_for(alice)
        folder_id = await _create(client)

        response = await client.get(f"/tripFolders/{folder_id}")

        assert response.status_code == 200
        assert "Lisbon" in response.text
        assert "alice" in response.text
        assert "private" in response.text

    @pytest.mark.asyncio
    async def test_create_with_blank_name_goes_back_to_form(self, client_for, alice):
        client = await client_for(alice)
        response = await client.post(
            "/tripFolders/create", data={"folderName": "   ", "tripDate": "2024-05-01"}
        )
        path, message = _location(response)
        assert path == "/tripFolders/create"
        assert message

    @pytest.mark.asyncio
    async def test_create_with_bad_date_goes_back_to_form(self, client_for, alice):
        client = await client_for(alice)
        response = await client.post(
            "/tripFolders/create", data={"folderName": "Lisbon", "tripDate": "someday"}
        )
        path, message = _location(response)
        assert path == "/tripFolders/create"
        assert message

    @pytest.mark.asyncio
    async def test_private_listing_with_filter(self, client_for, alice):
        client = await client_for(alice)
        await _create(client, "Lisbon")
        await _create(client, "Porto")

        response = await client.get("/tripFolders/private", params={"folderName": "lis"})

        assert response.status_code == 200
        assert "Lisbon" in response.text
        assert "Porto" not in response.text

    @pytest.mark.asyncio
    async def test_private_account_sees_refusal_on_listing(self, client_for, private_pat):
        client = await client_for(private_pat)

        response = await client.get("/tripFolders/shared")

        assert response.status_code == 200
        assert Rejection.PRIVATE_ACCOUNT.message in response.text
        assert "No trip folders found." in response.text

    @pytest.mark.asyncio
    async def test_member_switched_to_private_cannot_list_shared_folder(self, client_for, session_factory, alice, bob):
        alice_client = await client_for(alice)
        folder_id = await _create(alice_client)
        await alice_client.post(
            f"/tripFolders/{folder_id}/addUser?_method=PUT", data={"addUsername": "bob"}
        )
        async with session_factory() as session:
            (await session.get(User, bob.id)).is_private = True
            await session.commit()
        bob_client = await client_for(bob)

        response = await bob_client.get("/tripFolders/shared")

        assert response.status_code == 200
        assert "Lisbon" not in response.text
        assert Rejection.PRIVATE_ACCOUNT.message in response.text


class TestMembershipRoutes:

    @pytest.mark.asyncio
    async def test_add_user_then_both_see_shared_folder(self, client_for, alice, bob):
        alice_client = await client_for(alice)
        bob_client = await client_for(bob)
        folder_id = await _create(alice_client)

        response = await alice_client.post(
            f"/tripFolders/{folder_id}/addUser?_method=PUT", data={"addUsername": "bob"}
        )
        assert _location(response) == (f"/tripFolders/{folder_id}", None)

        for client in (alice_client, bob_client):
            shared = await client.get("/tripFolders/shared")
            assert "Lisbon" in shared.text

    @pytest.mark.asyncio
    async def test_duplicate_add_goes_back_to_add_user_form(self, client_for, alice, bob):
        client = await client_for(alice)
        folder_id = await _create(client)
        url = f"/tripFolders/{folder_id}/addUser?_method=PUT"
        await client.post(url, data={"addUsername": "bob"})

        response = await client.post(url, data={"addUsername": "bob"})

        assert _location(response) == (
            f"/tripFolders/{folder_id}/addUser",
            Rejection.ALREADY_MEMBER.message,
        )

    @pytest.mark.asyncio
    async def test_add_without_selection(self, client_for, alice):
        client = await client_for(alice)
        folder_id = await _create(client)

        response = await client.post(f"/tripFolders/{folder_id}/addUser?_method=PUT", data={})

        assert _location(response)[1] == Rejection.MISSING_TARGET.message

    @pytest.mark.asyncio
    async def test_add_user_form_lists_candidates(self, client_for, alice, bob, private_pat):
        client = await client_for(alice)
        folder_id = await _create(client)

        response = await client.get(f"/tripFolders/{folder_id}/addUser")

        assert response.status_code == 200
        assert 'value="bob"' in response.text
        assert 'value="pat"' not in response.text
        assert 'value="alice"' not in response.text

    @pytest.mark.asyncio
    async def test_leave_redirects_to_folder_list(self, client_for, alice, bob):
        alice_client = await client_for(alice)
        bob_client = await client_for(bob)
        folder_id = await _create(alice_client)
        await alice_client.post(
            f"/tripFolders/{folder_id}/addUser?_method=PUT", data={"addUsername": "bob"}
        )

        response = await bob_client.post(f"/tripFolders/{folder_id}/removeUser?_method=PUT")

        assert _location(response) == ("/tripFolders", None)
        private = await alice_client.get("/tripFolders/private")
        assert "Lisbon" in private.text

    @pytest.mark.asyncio
    async def test_non_member_leave_goes_back_to_folder(self, client_for, alice, carol):
        folder_id = await _create(await client_for(alice))
        carol_client = await client_for(carol)

        response = await carol_client.post(f"/tripFolders/{folder_id}/removeUser?_method=PUT")

        assert _location(response) == (f"/tripFolders/{folder_id}", Rejection.NOT_MEMBER.message)

    @pytest.mark.asyncio
    async def test_non_member_cannot_view_folder(self, client_for, alice, carol):
        folder_id = await _create(await client_for(alice))
        carol_client = await client_for(carol)

        response = await carol_client.get(f"/tripFolders/{folder_id}")

        assert _location(response) == ("/tripFolders", Rejection.NOT_MEMBER.message)

    @pytest.mark.asyncio
    async def test_unknown_folder(self, client_for, alice):
        client = await client_for(alice)

        response = await client.get(f"/tripFolders/{uuid.uuid4()}")

        path, message = _location(response)
        assert path == "/tripFolders"
        assert "was not found" in message

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "path", ["/tripFolders/not-a-folder-id", "/tripFolders/123/addUser", "/tripFolders/abc/editFolder"]
    )
    async def test_malformed_folder_id_redirects_to_folder_list(self, client_for, alice, path):
        client = await client_for(alice)

        response = await client.get(path)

        target, message = _location(response)
        assert target == "/tripFolders"
        assert "was not found" in message

    @pytest.mark.asyncio
    async def test_malformed_folder_id_on_form_submission(self, client_for, alice):
        client = await client_for(alice)

        response = await client.post("/tripFolders/abc/addUser?_method=PUT", data={"addUsername": "bob"})

        assert _location(response)[0] == "/tripFolders"


class TestEditDeleteAndFiles:

    @pytest.mark.asyncio
    async def test_edit_folder(self, client_for, alice):
        client = await client_for(alice)
        folder_id = await _create(client)

        response = await client.post(
            f"/tripFolders/{folder_id}?_method=PUT",
            data={"folderName": "Lisbon & Sintra", "tripDate": "2024-05-02"},
        )

        assert _location(response) == (f"/tripFolders/{folder_id}", None)
        page = await client.get(f"/tripFolders/{folder_id}")
        assert "Lisbon &amp; Sintra" in page.text
        assert "2024-05-02" in page.text

    @pytest.mark.asyncio
    async def test_edit_with_blank_name_goes_back_to_edit_form(self, client_for, alice):
        client = await client_for(alice)
        folder_id = await _create(client)

        response = await client.post(
            f"/tripFolders/{folder_id}?_method=PUT",
            data={"folderName": "", "tripDate": "2024-05-02"},
        )

        path, message = _location(response)
        assert path == f"/tripFolders/{folder_id}/editFolder"
        assert message

    @pytest.mark.asyncio
    async def test_delete_folder(self, client_for, alice):
        client = await client_for(alice)
        folder_id = await _create(client)

        response = await client.post(f"/tripFolders/{folder_id}?_method=DELETE")

        assert _location(response) == ("/tripFolders", None)
        gone = await client.get(f"/tripFolders/{folder_id}")
        assert _location(gone)[0] == "/tripFolders"

    @pytest.mark.asyncio
    async def test_add_file(self, client_for, alice, encoded_image):
        client = await client_for(alice)
        folder_id = await _create(client)

        response = await client.post(
            f"/tripFolders/{folder_id}/addFile",
            data={
                "title": "Tram 28",
                "description": "Up the hill",
                "userSetDate": "",
                "image": encoded_image,
            },
        )

        assert _location(response) == (f"/tripFolders/{folder_id}", None)
        page = await client.get(f"/tripFolders/{folder_id}")
        assert "Tram 28" in page.text
        assert "data:image/jpeg;base64," in page.text

    @pytest.mark.asyncio
    async def test_add_file_with_unreadable_image_goes_back_to_form(self, client_for, alice):
        client = await client_for(alice)
        folder_id = await _create(client)

        response = await client.post(
            f"/tripFolders/{folder_id}/addFile",
            data={"title": "Tram 28", "image": "{broken"},
        )

        path, message = _location(response)
        assert path == f"/tripFolders/{folder_id}/addFile"
        assert message
        page = await client.get(f"/tripFolders/{folder_id}")
        assert "Tram 28" not in page.text
