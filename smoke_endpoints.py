import httpx
import asyncio
import json
import sys

BASE_URL = "http://127.0.0.1:8000"
TEST_LEAGUE_ID = "1191596293294166016"
TABS = ["overview", "records", "trophies", "toilet", "trades", "rosters"]

async def check_endpoint(client: httpx.AsyncClient, url: str, endpoint_name: str, expected_status: int = 200, params=None):
    print(f"\n--- Checking {endpoint_name} ---")
    print(f"URL: {url} {params or ''}")
    try:
        response = await client.get(url, params=params, timeout=90.0) # A full league load walks every season
        print(f"Status Code: {response.status_code}")
        print(f"Response: {json.dumps(response.json())[:500]}")
        if response.status_code != expected_status:
            print(f"ISSUE: Expected status {expected_status}, got {response.status_code}")
            return False
    except httpx.RequestError as e:
        print(f"ISSUE: Request failed: {e}")
        return False
    except json.JSONDecodeError:
        print(f"ISSUE: Could not decode JSON response: {response.text}")
        return False
    return True

async def main(league_id: str):
    async with httpx.AsyncClient() as client:
        results = [await check_endpoint(client, f"{BASE_URL}/", "read_root")]

        for tab in TABS:
            results.append(await check_endpoint(client, f"{BASE_URL}/league/{league_id}/{tab}", tab))

        results.append(await check_endpoint(client, f"{BASE_URL}/dashboard", "dashboard", params={"league": league_id, "tab": "records"}))
        results.append(await check_endpoint(client, f"{BASE_URL}/dashboard", "dashboard (unknown tab)", 404, params={"league": league_id, "tab": "waivers"}))

        # Sleeper answers unknown leagues with a null body
        results.append(await check_endpoint(client, f"{BASE_URL}/league/0/overview", "unknown league", 404))

    print(f"\n{sum(results)}/{len(results)} checks passed")
    return all(results)


if __name__ == "__main__":
    league_id = sys.argv[1] if len(sys.argv) > 1 else TEST_LEAGUE_ID
    sys.exit(0 if asyncio.run(main(league_id)) else 1)
