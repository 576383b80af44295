from __future__ import annotations
import functools
import logging
import os
from typing import Dict, Optional

from flask import Flask, request, jsonify
from flask import render_template_string
from flask_cors import CORS

from assistant import SessionError, ShoppingAssistant
from catalog import PRODUCT_DETAILS
from commands import AddItem, RemoveItem, command_to_dict
from suggestions import substitutes_for

logger = logging.getLogger(__name__)

HOST = os.environ.get("HOST", "0.0.0.0")
PORT = int(os.environ.get("PORT", "5000"))
DEBUG = os.environ.get("FLASK_DEBUG", "").lower() in ("1", "true", "yes")
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
DEFAULT_LANG = os.environ.get("DEFAULT_LANG", "en-US")

app = Flask(__name__)
CORS(app)
assistant = ShoppingAssistant(language=DEFAULT_LANG)


def error(message: str, status: int = 400):
    return jsonify({"status": "error", "message": message}), status


def body() -> Dict:
    data = request.get_json(force=True, silent=True)
    return data if isinstance(data, dict) else {}


def serialized(view):
    """Run the whole view, response snapshot included, under the assistant lock."""
    @functools.wraps(view)
    def wrapper(*args, **kwargs):
        with assistant.lock:
            return view(*args, **kwargs)
    return wrapper


def ok(**extra):
    out = {"status": "ok"}
    out.update(assistant.snapshot())
    out.update(extra)
    return jsonify(out)


def parse_id(value) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


@app.route("/")
def index():
    return render_template_string(INDEX_HTML)


@app.post("/api/command")
@serialized
def api_command():
    data = body()
    text = (data.get("text") or "").strip()
    if not text:
        return error("Empty command")
    command = assistant.submit_utterance(
        text, current_product=data.get("current_product"), lang=data.get("lang"))
    return ok(**command_payload(command))


def command_payload(command) -> Dict:
    subject = None
    if isinstance(command, AddItem):
        subject = command.name
    elif isinstance(command, RemoveItem):
        subject = command.name_query
    return {
        "intent": command.intent,
        "message": assistant.state.feedback,
        "result": command_to_dict(command),
        "substitutes": substitutes_for(subject) if subject else [],
        "lang": assistant.state.transcript_lang,
    }


@app.get("/api/list")
@serialized
def api_list():
    return jsonify(assistant.snapshot(request.args.get("q")))


@app.post("/api/list")
@serialized
def api_list_post():
    data = body()
    action = data.get("action")
    if action == "add":
        message = assistant.add_item(data.get("item", ""), data.get("quantity", 1))
    elif action == "clear":
        message = assistant.clear()
    elif action in ("remove", "set", "increment", "decrement"):
        item_id = parse_id(data.get("id"))
        if item_id is None:
            return error("Missing item id")
        if action == "remove":
            message = assistant.remove_item(item_id)
        elif action == "set":
            message = assistant.set_quantity(item_id, data.get("quantity"))
        elif action == "increment":
            message = assistant.increment(item_id)
        else:
            message = assistant.decrement(item_id)
    else:
        return error("Unknown action")
    return ok(message=message)


@app.post("/api/search/clear")
@serialized
def api_search_clear():
    assistant.clear_search()
    return ok()


@app.get("/api/suggestions")
@serialized
def api_suggestions():
    return jsonify({"status": "ok", "suggestions": assistant.snapshot()["suggestions"]})


@app.get("/api/products")
@serialized
def api_products():
    return jsonify({"status": "ok", "products": PRODUCT_DETAILS})


@app.post("/api/product")
@serialized
def api_product():
    message = assistant.view_product(body().get("name", ""))
    return ok(message=message)


@app.post("/api/language")
@serialized
def api_language():
    assistant.set_language(body().get("lang") or DEFAULT_LANG)
    return ok()


@app.errorhandler(SessionError)
def session_error(e):
    logger.warning("Listening session error: %s", e)
    return error(str(e), 409)


@app.post("/api/listen/start")
@serialized
def api_listen_start():
    assistant.start_listening()
    return ok()


@app.post("/api/listen/interim")
@serialized
def api_listen_interim():
    assistant.interim(body().get("text", ""))
    return ok()


@app.post("/api/listen/final")
@serialized
def api_listen_final():
    data = body()
    command = assistant.finalize(data.get("text", ""), current_product=data.get("current_product"))
    if command is None:
        return ok(intent=None, message=assistant.state.feedback)
    return ok(**command_payload(command))


@app.post("/api/listen/cancel")
@serialized
def api_listen_cancel():
    assistant.cancel_listening()
    return ok()


@app.post("/api/listen/error")
@serialized
def api_listen_error():
    message = assistant.listening_error(body().get("error", ""))
    return ok(message=message)


INDEX_HTML = r"""
<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1" />
  <title>Voice Shopping Assistant</title>
  <style>
    :root {
      --bg: #0b0f14; --card: #121825; --muted: #93a1b1; --text: #ecf0f1; --accent:#7c5cff; --accent2:#20c997;
    }
    * { box-sizing: border-box; }
    body { margin:0; font-family: system-ui, -apple-system, Segoe UI, Roboto, Helvetica, Arial, sans-serif; background: var(--bg); color: var(--text); }
    header { padding: 16px; display:flex; justify-content:space-between; align-items:center; background: linear-gradient(90deg, rgba(124,92,255,.2), rgba(32,201,151,.2)); border-bottom: 1px solid #1f2937; }
    h1 { margin:0; font-size: 20px; }
    main { padding: 16px; display:grid; grid-template-columns: 1fr; gap: 16px; max-width: 1100px; margin: 0 auto; }
    .card { background: var(--card); border: 1px solid #1f2937; border-radius: 16px; padding: 16px; }
    .row { display:flex; gap: 12px; flex-wrap: wrap; align-items: center; }
    button { background: var(--accent); color: white; border: none; border-radius: 999px; padding: 10px 16px; font-weight: 600; cursor: pointer; }
    button:disabled { background: #334155; cursor: not-allowed; }
    button.secondary { background: #334155; }
    button.ghost { background: transparent; border:1px solid #334155; }
    .pill { background: #1f2937; padding: 4px 10px; border-radius: 999px; font-size: 12px; color: var(--muted); }
    .grid { display:grid; grid-template-columns: repeat(auto-fit, minmax(240px,1fr)); gap: 12px; }
    .category { font-size: 12px; color: var(--muted); text-transform: uppercase; letter-spacing: .1em; margin-bottom: 6px; }
    .item { display:flex; justify-content: space-between; align-items: center; padding: 10px; background:#0e1420; border:1px solid #162033; border-radius: 12px; gap: 8px; }
    .qty { display:flex; gap: 8px; align-items: center; }
    input, select { background:#0e1420; color:var(--text); border:1px solid #162033; border-radius: 10px; padding: 10px; }
    .recognition { min-height: 44px; display:flex; align-items:center; gap:10px; color: var(--muted); }
    .result { padding:10px; background:#0e1420; border:1px solid #162033; border-radius:12px; margin-top:8px; }
  </style>
</head>
<body>
  <header>
    <h1>Voice Shopping Assistant</h1>
    <div class="row">
      <select id="lang">
        <option value="en-US">English (US)</option>
        <option value="en-GB">English (UK)</option>
        <option value="es-ES">Spanish</option>
        <option value="fr-FR">French</option>
        <option value="hi-IN">Hindi</option>
      </select>
      <button id="startBtn">Start</button>
      <button id="stopBtn" class="secondary" disabled>Stop</button>
    </div>
  </header>

  <main>
    <section class="card">
      <div class="row"><div class="pill">Try: "Add 2 bananas", "Remove milk", "Clear my list", "Battery of iPhone 12"</div></div>
      <div class="recognition"><span id="transcript">...</span></div>
      <div class="result" id="feedback"></div>
      <div class="row">
        <input id="manual" placeholder="Or type a command and press Enter" style="flex:1" />
      </div>
    </section>

    <section class="card" id="section-add">
      <h3>Add Item</h3>
      <form id="addForm" class="row">
        <input id="addName" placeholder="Type an item (e.g., apples)" style="flex:1" />
        <input id="addQty" type="number" min="1" value="1" style="width:80px" />
        <button type="submit">Add</button>
      </form>
    </section>

    <section class="card" id="section-list">
      <div class="row"><h3>Shopping List</h3><span class="pill" id="searchPill"></span></div>
      <div id="list" class="grid"></div>
    </section>

    <section class="card" id="section-suggestions">
      <h3>Suggestions</h3>
      <div id="suggestions" class="grid"></div>
    </section>

    <section class="card" id="section-products">
      <h3>Products</h3>
      <div id="products" class="row"></div>
    </section>
  </main>

  <script>
    const $ = (id) => document.getElementById(id);
    let state = {};

    async function api(path, payload){
      const opts = payload === undefined ? {} : {method:'POST', headers:{'Content-Type':'application/json'}, body: JSON.stringify(payload)};
      const res = await fetch(path, opts);
      const data = await res.json();
      if(data.status === 'error'){ $('feedback').textContent = data.message; return null; }
      render(data);
      return data;
    }

    function render(data){
      state = data;
      $('transcript').textContent = data.transcript ? `"${data.transcript}"` : '...';
      $('feedback').textContent = data.feedback || '';
      if(data.substitutes && data.substitutes.length){
        $('feedback').textContent += ' (Substitutes: ' + data.substitutes.join(', ') + ')';
      }
      renderList(data.list || {});
      renderSuggestions(data.suggestions || []);
      renderProducts(data.products || [], data.selected_product);
      $('searchPill').textContent = data.search_query ? `Filter: ${data.search_query} (click to clear)` : '';
      $('startBtn').disabled = !!data.is_listening;
      $('stopBtn').disabled = !data.is_listening;
      if(data.intent === 'navigate' && data.scroll_target){
        const el = $('section-' + data.scroll_target.split(' ')[0]);
        if(el) el.scrollIntoView({behavior:'smooth'});
      }
    }

    function renderList(grouped){
      const listEl = $('list');
      listEl.innerHTML = '';
      if(Object.keys(grouped).length === 0){ listEl.textContent = 'Your shopping list is empty.'; return; }
      Object.entries(grouped).forEach(([cat, items]) => {
        const wrap = document.createElement('div');
        const h = document.createElement('div'); h.className='category'; h.textContent = cat; wrap.appendChild(h);
        items.forEach(it => {
          const row = document.createElement('div'); row.className = 'item';
          const left = document.createElement('div'); left.textContent = it.name;
          const right = document.createElement('div'); right.className='qty';
          const minus = document.createElement('button'); minus.className='ghost'; minus.textContent='-'; minus.onclick=()=>api('/api/list', {action:'decrement', id: it.id});
          const qty = document.createElement('span'); qty.textContent = it.quantity; qty.className='pill';
          const plus = document.createElement('button'); plus.className='ghost'; plus.textContent='+'; plus.onclick=()=>api('/api/list', {action:'increment', id: it.id});
          const rem = document.createElement('button'); rem.className='secondary'; rem.textContent='x'; rem.onclick=()=>api('/api/list', {action:'remove', id: it.id});
          right.append(minus, qty, plus, rem);
          row.append(left, right);
          wrap.appendChild(row);
        });
        listEl.appendChild(wrap);
      });
    }

    function renderSuggestions(suggestions){
      const el = $('suggestions');
      el.innerHTML = '';
      suggestions.forEach(s => {
        const wrap = document.createElement('div');
        const h = document.createElement('div'); h.className='category'; h.textContent = s.message; wrap.appendChild(h);
        const row = document.createElement('div'); row.className='row';
        s.items.forEach(x => {
          const b = document.createElement('button'); b.className='ghost'; b.textContent = `+ ${x}`;
          b.onclick = ()=>api('/api/list', {action:'add', item: x, quantity: 1});
          row.appendChild(b);
        });
        wrap.appendChild(row);
        el.appendChild(wrap);
      });
    }

    function renderProducts(products, selected){
      const el = $('products');
      el.innerHTML = '';
      products.forEach(p => {
        const b = document.createElement('button');
        b.className = p === selected ? '' : 'ghost';
        b.textContent = p;
        b.onclick = ()=>api('/api/product', {name: p});
        el.appendChild(b);
      });
    }

    $('searchPill').onclick = ()=>api('/api/search/clear', {});

    $('addForm').addEventListener('submit', (e)=>{
      e.preventDefault();
      api('/api/list', {action:'add', item: $('addName').value, quantity: parseInt($('addQty').value || '1', 10)});
      $('addName').value = ''; $('addQty').value = 1;
    });

    $('manual').addEventListener('keydown', (e)=>{
      if(e.key==='Enter'){
        const text = $('manual').value.trim(); if(!text) return; $('manual').value='';
        api('/api/command', {text, lang: $('lang').value});
      }
    });

    $('lang').addEventListener('change', ()=>{
      if(recog) recog.lang = $('lang').value;
      api('/api/language', {lang: $('lang').value});
    });

    // Voice recognition via Web Speech API; the server tracks the session.
    let recog = null; let finished = false;
    function initRecog(){
      const SR = window.SpeechRecognition || window.webkitSpeechRecognition;
      if(!SR){ $('feedback').textContent = 'Voice recognition not supported in this browser. Use Chrome/Edge.'; $('startBtn').disabled = true; return; }
      recog = new SR();
      recog.continuous = false; recog.interimResults = true; recog.lang = $('lang').value;
      recog.onresult = (e)=>{
        let interim = ''; let final = '';
        for(let i = e.resultIndex; i < e.results.length; ++i){
          const r = e.results[i];
          if(r.isFinal) final += r[0].transcript; else interim += r[0].transcript;
        }
        if(final && !finished){ finished = true; api('/api/listen/final', {text: final.trim()}); }
        else if(interim) api('/api/listen/interim', {text: interim.trim()});
      };
      recog.onerror = (e)=>{ if(!finished){ finished = true; api('/api/listen/error', {error: e.error}); } };
      recog.onend = ()=>{ if(!finished){ finished = true; api('/api/listen/cancel', {}); } };
    }
    $('startBtn').onclick = async ()=>{
      if(!recog) initRecog();
      if(!recog) return;
      const data = await api('/api/listen/start', {});
      if(!data) return;
      finished = false;
      try { recog.start(); } catch(err){ finished = true; api('/api/listen/error', {error: 'Cannot start microphone'}); }
    };
    $('stopBtn').onclick = ()=>{ if(recog) recog.stop(); };

    api('/api/list');
    initRecog();
  </script>
</body>
</html>
"""

if __name__ == "__main__":
    logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    app.run(host=HOST, port=PORT, debug=DEBUG)
