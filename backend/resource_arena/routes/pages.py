"""Server-rendered page shells for playing, results and the dashboard.

Pages hold no state of their own: each one loads data from the JSON API
in the browser. The identity provider's session token, when present, is
read from localStorage["sessionToken"] and sent as a Bearer header.
"""
import html

from fastapi import APIRouter
from fastapi.responses import HTMLResponse, RedirectResponse

router = APIRouter(tags=["pages"])

_STYLE = """
  body { font-family: system-ui, Arial; max-width: 860px; margin: 0 auto; padding: 22px; }
  input, button { font-size: 16px; padding: 10px; }
  input { width: 100%; box-sizing: border-box; margin: 6px 0; }
  table { border-collapse: collapse; width: 100%; }
  th, td { border: 1px solid #ddd; padding: 8px; }
  th { text-align: left; background: #f7f7f7; }
  .card { border: 1px solid #ddd; border-radius: 12px; padding: 16px; margin: 16px 0; }
  .muted { color: #666; }
  .danger { color: #b00020; }
  nav a { margin-right: 14px; }
"""

_API_HELPERS = """
function authHeaders() {
  const token = localStorage.getItem("sessionToken");
  return token ? { "Authorization": "Bearer " + token } : {};
}
function currentUserId() {
  const token = localStorage.getItem("sessionToken");
  if (!token) return null;
  try { return JSON.parse(atob(token.split(".")[1].replace(/-/g, "+").replace(/_/g, "/"))).sub; }
  catch (e) { return null; }
}
async function api(method, path, body) {
  const headers = Object.assign({ "Content-Type": "application/json" }, authHeaders());
  const res = await fetch(path, { method, headers, body: body ? JSON.stringify(body) : undefined });
  const payload = await res.json().catch(() => ({}));
  return { ok: res.ok, status: res.status, payload };
}
function esc(value) {
  const div = document.createElement("div");
  div.textContent = value == null ? "" : String(value);
  return div.innerHTML;
}
function showError(message) {
  document.getElementById("error").textContent = message;
}
function renderLeaderboard(target, entries) {
  if (!entries.length) { target.innerHTML = "<li>No scores yet.</li>"; return; }
  target.innerHTML = entries.map(e => "<li><strong>" + esc(e.username) + "</strong> - " + esc(e.score) + "</li>").join("");
}
"""


def page(title: str, body: str, script: str = "") -> HTMLResponse:
    parts = [
        "<!doctype html><html><head>",
        f"<title>{html.escape(title)}</title>",
        '<meta name="viewport" content="width=device-width, initial-scale=1.0">',
        "<style>", _STYLE, "</style></head><body>",
        '<nav><a href="/play">Play</a><a href="/dashboard">Dashboard</a></nav>',
        f"<h1>{html.escape(title)}</h1>",
        body,
        '<p id="error" class="danger"></p>',
        "<script>", _API_HELPERS, script, "</script>",
        "</body></html>",
    ]
    return HTMLResponse("".join(parts))


@router.get("/", include_in_schema=False)
def home():
    return RedirectResponse("/play")


@router.get("/play", response_class=HTMLResponse, include_in_schema=False)
def play_page():
    body = """
    <div class="card" id="challenge"><p class="muted">Loading challenge...</p></div>
    <form id="play-form" class="card" hidden>
      <div id="urls"></div>
      <button type="button" id="add-url">+ Add another resource</button>
      <button type="submit" id="submit">Submit resources</button>
    </form>
    """
    script = """
let promptId = null;
const MAX_URLS = 4;
function addUrlField() {
  const urls = document.getElementById("urls");
  if (urls.children.length >= MAX_URLS) return;
  const input = document.createElement("input");
  input.type = "url";
  input.placeholder = "Resource " + (urls.children.length + 1) + " (URL)";
  input.required = urls.children.length === 0;
  urls.appendChild(input);
  document.getElementById("add-url").hidden = urls.children.length >= MAX_URLS;
}
async function loadPrompt() {
  const { ok, payload } = await api("GET", "/api/prompts/next");
  const box = document.getElementById("challenge");
  if (!ok) { box.innerHTML = ""; showError(payload.error || "Could not load a challenge"); return; }
  if (payload.done) { box.innerHTML = "<p>" + esc(payload.message) + "</p>"; return; }
  promptId = payload.prompt.id;
  box.innerHTML = "<h2>Level " + esc(payload.prompt.level) + ": " + esc(payload.prompt.title) + "</h2>"
    + "<p>" + esc(payload.prompt.description) + "</p>";
  document.getElementById("play-form").hidden = false;
  addUrlField();
}
document.getElementById("add-url").addEventListener("click", addUrlField);
document.getElementById("play-form").addEventListener("submit", async (event) => {
  event.preventDefault();
  const button = document.getElementById("submit");
  button.disabled = true;
  showError("");
  const resources = Array.from(document.querySelectorAll("#urls input"))
    .map(i => i.value.trim()).filter(v => v.length > 0);
  const { ok, payload } = await api("POST", "/api/matches", { promptId, resources });
  if (!ok) { showError(payload.error || "Could not create the match"); button.disabled = false; return; }
  window.location.href = "/play/result/" + payload.matchId;
});
loadPrompt();
"""
    return page("Find the best resources", body, script)


@router.get("/play/result/{match_id}", response_class=HTMLResponse, include_in_schema=False)
def result_page(match_id: int):
    body = f"""
    <div class="card" id="status"><p class="muted">Evaluating your resources and loading results...</p></div>
    <div id="results" hidden>
      <h2>Total score: <span id="total"></span></h2>
      <table><thead><tr><th>Resource (URL)</th><th>Score</th><th>Explanation</th></tr></thead>
      <tbody id="evaluations"></tbody></table>
      <div class="card" id="claim" hidden>
        <p>Played without an account? Save this result to your profile.</p>
        <button type="button" id="claim-button">Save to my account</button>
      </div>
      <h2>Global leaderboard</h2>
      <ol id="leaderboard"></ol>
      <p><a href="/play">Play again</a> | <a href="/dashboard">View dashboard</a></p>
    </div>
    <input type="hidden" id="match-id" value="{match_id}">
    """
    script = """
const matchId = Number(document.getElementById("match-id").value);
async function loadMatch() {
  const { ok, payload } = await api("GET", "/api/matches/" + matchId);
  if (!ok) throw new Error(payload.error || "Could not load the match");
  return payload;
}
async function run() {
  try {
    let match = await loadMatch();
    if (match.evaluations.length === 0) {
      const res = await api("POST", "/api/evaluate", { matchId });
      // 409 means another request already scored this match
      if (!res.ok && res.status !== 409) throw new Error(res.payload.error || "AI evaluation failed");
      match = await loadMatch();
    }
    document.getElementById("total").textContent = match.total == null ? "-" : match.total;
    document.getElementById("evaluations").innerHTML = match.evaluations.map(e =>
      "<tr><td>" + esc(e.url) + "</td><td>" + esc(e.score) + "</td><td>" + esc(e.explanation) + "</td></tr>"
    ).join("");
    const query = match.isAnonymous ? "?includeMatchId=" + matchId : "";
    const board = await api("GET", "/api/leaderboard" + query);
    if (board.ok) renderLeaderboard(document.getElementById("leaderboard"), board.payload.leaderboard);
    const userId = currentUserId();
    if (match.isAnonymous && userId) {
      document.getElementById("claim").hidden = false;
      document.getElementById("claim-button").addEventListener("click", async () => {
        const res = await api("POST", "/api/matches", { associateUserId: userId, matchId });
        if (!res.ok) { showError(res.payload.error || "Could not save the match"); return; }
        document.getElementById("claim").hidden = true;
      });
    }
    document.getElementById("status").hidden = true;
    document.getElementById("results").hidden = false;
  } catch (err) {
    document.getElementById("status").hidden = true;
    showError("Error: " + err.message);
  }
}
run();
"""
    return page("Your match results", body, script)


@router.get("/dashboard", response_class=HTMLResponse, include_in_schema=False)
def dashboard_page():
    body = """
    <h2>Global leaderboard</h2>
    <ol id="leaderboard"><li class="muted">Loading...</li></ol>
    <div id="history-section" hidden>
      <h2>Your match history</h2>
      <table><thead><tr><th>Date</th><th>Level</th><th>Challenge</th><th>Score</th></tr></thead>
      <tbody id="history"></tbody></table>
      <p id="no-history" class="muted" hidden>You have not played any matches yet.</p>
    </div>
    <p><a href="/play">Start playing</a></p>
    """
    script = """
async function load() {
  const board = await api("GET", "/api/leaderboard");
  if (!board.ok) { showError(board.payload.error || "Could not load the leaderboard"); return; }
  renderLeaderboard(document.getElementById("leaderboard"), board.payload.leaderboard);
  if (!currentUserId()) return;
  const history = await api("GET", "/api/matches");
  if (!history.ok) { showError(history.payload.error || "Could not load your matches"); return; }
  document.getElementById("history-section").hidden = false;
  const rows = history.payload.matches;
  document.getElementById("no-history").hidden = rows.length > 0;
  document.getElementById("history").innerHTML = rows.map(m =>
    "<tr><td>" + esc(m.startedAt ? new Date(m.startedAt).toLocaleDateString() : "") + "</td><td>"
    + esc(m.prompt.level) + "</td><td>" + esc(m.prompt.title) + "</td><td>"
    + esc(m.scoreAi == null ? "-" : m.scoreAi) + "</td></tr>"
  ).join("");
}
load();
"""
    return page("Dashboard", body, script)
